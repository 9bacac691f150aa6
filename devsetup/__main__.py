from devsetup.cli import app

app()
