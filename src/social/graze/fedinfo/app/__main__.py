from social.graze.fedinfo.app.cli import invoke

invoke()
