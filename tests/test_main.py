"""Tests for the demo entry point."""

from __future__ import annotations

from unittest.mock import patch

from src.core.config import Settings
from src.core.connectivity import Connectivity, NetworkState, NetworkType
from src.main import main, run


def _make_settings(**overrides: object) -> Settings:
    """Create a Settings object with test defaults."""
    defaults = dict(
        app_id="netwatch",
        transports=(NetworkType.WIFI, NetworkType.CELLULAR),
        log_level="INFO",
    )
    defaults.update(overrides)
    return Settings(**defaults)


class TestRun:
    async def test_scripted_handover(self) -> None:
        observed = await run(_make_settings(), step_delay=0.1)

        wifi = Connectivity.from_state(NetworkState.CONNECTED, NetworkType.WIFI)
        cellular = Connectivity.from_state(NetworkState.CONNECTED, NetworkType.CELLULAR)
        lost = Connectivity.from_state(NetworkState.DISCONNECTED)
        assert observed == [wifi, lost, wifi, cellular, Connectivity(), cellular]


class TestMain:
    def test_main_loads_settings_and_runs(self) -> None:
        settings = _make_settings(log_level="DEBUG")
        with patch("src.main.load_settings", return_value=settings), \
                patch("src.main.logging.basicConfig") as basic_config, \
                patch("src.main.asyncio.run") as asyncio_run:
            main()

        basic_config.assert_called_once()
        assert basic_config.call_args.kwargs["level"] == "DEBUG"
        asyncio_run.assert_called_once()
        asyncio_run.call_args.args[0].close()
