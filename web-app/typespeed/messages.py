from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape


TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

SUCCESS_TEXT = "You did it, congrats!"
FAILURE_TEXT = "You did too much errors, try again!"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def _render(name: str, **context) -> str:
    return _env.get_template(f"fragments/{name}.html").render(**context)


def text_to_type(phrase: str) -> str:
    return _render("text_to_type", phrase=phrase)


def speed_update(speed: int) -> str:
    return _render("speed", speed=speed)


def verdict(succeeded: bool) -> str:
    return _render("verdict", verdict=SUCCESS_TEXT if succeeded else FAILURE_TEXT)


def clear_input() -> str:
    return _render("clear_input")
