import io

from skufolders.cli_formatter import CLIFormatter, FormatterConfig, detect_terminal_capabilities


def test_plain_mode_when_not_a_tty():
    config = detect_terminal_capabilities(stdout_isatty=False)
    assert config.plain_mode
    assert not config.use_color
    assert not config.osc8_links


def test_no_color_flag_and_env(monkeypatch):
    monkeypatch.setenv("TERM", "xterm-256color")
    assert not detect_terminal_capabilities(no_color_flag=True, stdout_isatty=True).use_color
    monkeypatch.setenv("NO_COLOR", "1")
    assert not detect_terminal_capabilities(stdout_isatty=True).use_color


def test_theme_from_environment(monkeypatch):
    monkeypatch.setenv("SKUFOLDERS_THEME", "LIGHT")
    assert detect_terminal_capabilities(stdout_isatty=False).theme == "light"
    assert detect_terminal_capabilities(stdout_isatty=False, theme_preference="dark").theme == "dark"
    monkeypatch.setenv("SKUFOLDERS_THEME", "neon")
    assert detect_terminal_capabilities(stdout_isatty=False).theme == "dark"


def test_plain_output_has_no_escape_codes():
    stream = io.StringIO()
    formatter = CLIFormatter(FormatterConfig(use_color=False, unicode_enabled=False, plain_mode=True), stream)
    formatter.section("2 group(s)")
    formatter.kv("ABC", "2 image(s)")
    formatter.bullet("ABC/1-eci-a.jpg")
    assert formatter.link("/tmp/x.zip", "x.zip") == "x.zip"
    output = stream.getvalue()
    assert "\033" not in output
    assert "> 2 group(s)" in output
    assert "  - ABC/1-eci-a.jpg" in output


def test_colored_output_wraps_text():
    stream = io.StringIO()
    formatter = CLIFormatter(FormatterConfig(), stream)
    formatter.success("done")
    assert stream.getvalue().startswith("\033[1m")
    assert stream.getvalue().rstrip("\n").endswith("\033[0m")
