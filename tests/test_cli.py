from unittest.mock import patch

import pytest

from exam_wallet.cli import main, parse_args
from exam_wallet.config import Settings
from exam_wallet.context import AppContext
from exam_wallet.core.exams_store import ExamsStore

from .conftest import make_image, open_image


def _write_image(tmp_path, media_type="image/jpeg", size=(1000, 500), name="photo.jpg"):
    path = tmp_path / name
    path.write_bytes(make_image(media_type, size).content)
    return path


class TestTransformCommands:
    def test_resize_writes_into_directory(self, tmp_path) -> None:
        source = _write_image(tmp_path)
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        main(["--log-level", "none", "resize", str(source), "--max-width", "200", "--max-height", "200",
              "-o", str(out_dir)])

        assert open_image((out_dir / "photo.jpg").read_bytes()).size == (200, 100)

    def test_convert(self, tmp_path) -> None:
        source = _write_image(tmp_path, "image/png", (40, 40), "sig.png")
        target = tmp_path / "sig.webp"

        main(["--log-level", "none", "convert", str(source), "--to", "webp", "-o", str(target)])

        assert open_image(target.read_bytes()).format == "WEBP"

    def test_crop_outside_image_exits_with_error(self, tmp_path) -> None:
        source = _write_image(tmp_path, size=(100, 100))

        with pytest.raises(SystemExit) as info:
            main(["--log-level", "none", "crop", str(source), "--x", "50", "--y", "50",
                  "--width", "100", "--height", "10", "-o", str(tmp_path)])

        assert info.value.code == 1

    def test_reduce_small_file_is_left_alone(self, tmp_path) -> None:
        source = _write_image(tmp_path, size=(50, 50))
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        main(["--log-level", "none", "reduce", str(source), "--target-kb", "500", "-o", str(out_dir)])

        assert list(out_dir.iterdir()) == []

    def test_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_missing_input_exits_with_error(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as info:
            main(["--log-level", "none", "resize", str(tmp_path / "missing.jpg")])

        assert info.value.code == 1

    def test_unwritable_output_exits_with_error(self, tmp_path) -> None:
        source = _write_image(tmp_path)

        with pytest.raises(SystemExit) as info:
            main(["--log-level", "none", "convert", str(source), "--to", "png",
                  "-o", str(tmp_path / "no-such-dir" / "photo.png")])

        assert info.value.code == 1


class TestLogLevel:
    def test_defaults_to_settings(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("EXAM_WALLET_LOG_LEVEL", "ERROR")
        source = _write_image(tmp_path, size=(40, 40))

        with patch("exam_wallet.cli.configure_logging") as configure:
            main(["convert", str(source), "--to", "png", "-o", str(tmp_path)])

        configure.assert_called_once_with("error")

    def test_flag_overrides_settings(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("EXAM_WALLET_LOG_LEVEL", "ERROR")
        source = _write_image(tmp_path, size=(40, 40))

        with patch("exam_wallet.cli.configure_logging") as configure:
            main(["--log-level", "debug", "convert", str(source), "--to", "png", "-o", str(tmp_path)])

        configure.assert_called_once_with("debug")

    def test_none_from_settings_disables_logging(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("EXAM_WALLET_LOG_LEVEL", "none")
        source = _write_image(tmp_path, size=(40, 40))

        with patch("exam_wallet.cli.configure_logging") as configure:
            main(["convert", str(source), "--to", "png", "-o", str(tmp_path)])

        configure.assert_not_called()


class TestAppContext:
    def test_stores_share_remote_and_settings(self, remote, tmp_path) -> None:
        settings = Settings(user_id="u1", freshness_seconds=120, subscriptions_file=tmp_path / "subs.json")

        context = AppContext.create(settings, remote=remote)

        assert isinstance(context.exams, ExamsStore)
        assert context.exams.remote is remote
        assert context.documents.remote is remote
        assert context.curator.remote is remote
        assert context.exams.user_id == "u1"
        assert context.documents.cache.freshness_seconds == 120
        assert context.exams.markers.path == tmp_path / "subs.json"

    def test_search_client_uses_configured_key(self, remote, tmp_path) -> None:
        settings = Settings(serpapi_api_key="serp-key", subscriptions_file=tmp_path / "subs.json")
        context = AppContext.create(settings, remote=remote)

        assert context.search_client("serpapi").api_key == "serp-key"

    async def test_aclose(self, remote, tmp_path) -> None:
        context = AppContext.create(Settings(subscriptions_file=tmp_path / "subs.json"), remote=remote)

        await context.aclose()

        remote.aclose.assert_awaited_once()

    def test_settings_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("EXAM_WALLET_SUPABASE_URL", "https://project.supabase.co")
        monkeypatch.setenv("EXAM_WALLET_FRESHNESS_SECONDS", "60")

        settings = Settings()

        assert settings.supabase_url == "https://project.supabase.co"
        assert settings.freshness_seconds == 60
