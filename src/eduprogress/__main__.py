from eduprogress.cli.commands import app

app()
