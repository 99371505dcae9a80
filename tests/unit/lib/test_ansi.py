from tuffous.lib import ansi
from tuffous.lib.ansi import DEFAULT, PLAIN, POOL, Theme, bold, strip, tag_color, use


def test_theme_defaults():
    assert DEFAULT.bold == "\033[1m"
    assert DEFAULT.reset == "\033[0m"
    assert Theme().red == "\033[38;5;203m"
    assert len(POOL) == 8


def test_plain_theme_has_no_codes():
    assert all(getattr(PLAIN, name) == "" for name in Theme.__dataclass_fields__)
    assert ansi.red("x") == "x"
    assert tag_color("home") == ""


def test_default_theme_colors():
    use(DEFAULT)
    assert bold("hi") == "\033[1mhi\033[0m"
    assert ansi.green("ok") == "\033[38;5;114mok\033[0m"
    assert tag_color("home") == tag_color("home")
    assert tag_color("home") in POOL


def test_strip():
    assert strip("\033[1mhello\033[0m") == "hello"
