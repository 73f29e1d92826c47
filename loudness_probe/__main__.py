from loudness_probe.cli import app

app()
