from .main import app

app(prog_name="ollama-code")
