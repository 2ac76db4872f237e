"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import typing as typ

import pytest

from repokeeper.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)
from tests.unit.fakes import FakeLogger

if typ.TYPE_CHECKING:
    from collections.abc import Callable


class TestNormalizeLogLevel:
    """Tests for normalize_log_level."""

    @pytest.mark.parametrize(
        ("raw", "level"),
        [
            ("warning", "WARNING"),
            (" trace ", "TRACE"),
            ("Warn", "WARNING"),
            ("fatal", "CRITICAL"),
        ],
        ids=("lowercase", "padded", "warn-alias", "fatal-alias"),
    )
    def test_accepted_levels(self, raw: str, level: str) -> None:
        """Known names and aliases are accepted regardless of case."""
        assert normalize_log_level(raw) == (level, False)

    @pytest.mark.parametrize("raw", [None, "", "verbose"], ids=("none", "empty", "bad"))
    def test_rejected_levels_fall_back_to_info(self, raw: str | None) -> None:
        """Unusable input is flagged and replaced with INFO."""
        assert normalize_log_level(raw) == ("INFO", True)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        ("raw", "level", "invalid"),
        [("debug", "DEBUG", False), ("nope", "INFO", True)],
        ids=("valid", "invalid"),
    )
    def test_installs_root_handler(
        self,
        monkeypatch: pytest.MonkeyPatch,
        raw: str,
        level: str,
        *,
        invalid: bool,
    ) -> None:
        """basicConfig receives the normalised level without forcing."""
        captured: dict[str, object] = {}
        monkeypatch.setattr(
            "repokeeper.logging.basicConfig", lambda **kwargs: captured.update(kwargs)
        )

        assert configure_logging(raw) == (level, invalid)
        assert captured == {"level": level, "force": False}


class TestLogHelpers:
    """Tests for the log_* helpers."""

    def test_template_without_args_is_untouched(self) -> None:
        """Percent signs survive when nothing is interpolated."""
        assert format_log_message("100% done") == "100% done"

    @pytest.mark.parametrize(
        ("helper", "level"),
        [
            (log_debug, "DEBUG"),
            (log_info, "INFO"),
            (log_warning, "WARNING"),
            (log_error, "ERROR"),
        ],
        ids=("debug", "info", "warning", "error"),
    )
    def test_helpers_format_at_their_level(
        self, helper: Callable[..., None], level: str
    ) -> None:
        """Each helper interpolates its arguments and logs at its level."""
        logger = FakeLogger()

        helper(logger, "inspected %d repositories under %s", 3, "/src")

        assert logger.calls == [
            (level, "inspected 3 repositories under /src", None, False)
        ]

    def test_exc_info_is_forwarded(self) -> None:
        """Exceptions ride along with warnings."""
        logger = FakeLogger()
        exc = ValueError("boom")

        log_warning(logger, "skipping %s", "/src/demo", exc_info=exc)

        assert logger.calls == [("WARNING", "skipping /src/demo", exc, False)]

    def test_log_exception(self) -> None:
        """log_exception logs the message verbatim at ERROR."""
        logger = FakeLogger()
        exc = RuntimeError("boom")

        log_exception(logger, "100% failed", exc)

        assert logger.calls == [("ERROR", "100% failed", exc, False)]
