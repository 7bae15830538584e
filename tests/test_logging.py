import io

from pokebattle.core.logging import Logger


def test_structured_line_with_extras():
    buf = io.StringIO()
    log = Logger("DEBUG", stream=buf)
    log.info("BattleWon", winner="Pikachu", wins=3)
    line = buf.getvalue()
    assert "[INFO] BattleWon winner=Pikachu wins=3" in line
    assert line.endswith("\n")


def test_threshold_filters_lower_levels():
    buf = io.StringIO()
    log = Logger("WARN", stream=buf)
    log.debug("Hidden")
    log.info("Hidden")
    log.warn("Shown")
    assert "Hidden" not in buf.getvalue()
    assert "[WARN] Shown" in buf.getvalue()
    log.set_level("ERROR")
    assert not log.is_enabled("WARN")
    log.set_level("NOPE")  # unknown falls back to INFO
    assert log.is_enabled("INFO") and not log.is_enabled("DEBUG")
