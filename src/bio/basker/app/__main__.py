from bio.basker.app.cli import invoke

invoke()
