import pytest

from leggitesto.ocr.config import RecognizerSettings
from leggitesto.ocr.errors import ErrorKind, RecognizerError
from leggitesto.ocr.tessdata import default_tessdata_folder, extract_bundled_data, resolve_tessdata


def test_extracts_bundled_data_on_first_start(settings):
    location = resolve_tessdata(settings)
    assert location.path == default_tessdata_folder(settings).resolve()
    assert (location.path / "eng.traineddata").exists()
    assert location.provided is False
    assert location.has_osd is False


def test_existing_folder_kept_unless_refresh(settings, bundled):
    folder = default_tessdata_folder(settings)
    resolve_tessdata(settings)
    (folder / "extra.traineddata").write_bytes(b"x")
    resolve_tessdata(settings)
    assert (folder / "extra.traineddata").exists()

    refreshed = settings.model_copy(update={"refresh_data": True})
    resolve_tessdata(refreshed)
    assert not (folder / "extra.traineddata").exists()
    assert (folder / "deu.traineddata").exists()


def test_provided_data_path_wins(settings, tmp_path):
    user = tmp_path / "user"
    (user / "tessdata").mkdir(parents=True)
    (user / "tessdata" / "osd.traineddata").write_bytes(b"x")
    location = resolve_tessdata(settings.model_copy(update={"data_path": user}))
    assert location.provided is True
    assert location.has_osd is True
    assert location.path == (user / "tessdata").resolve()


def test_missing_provided_data_path_is_fatal(settings, tmp_path):
    with pytest.raises(RecognizerError) as err:
        resolve_tessdata(settings.model_copy(update={"data_path": tmp_path / "nope"}))
    assert err.value.kind is ErrorKind.DATA_PATH_MISSING
    assert "provided" in err.value.message


def test_no_data_at_all_is_fatal(tmp_path):
    settings = RecognizerSettings(app_folder=tmp_path / "app", bundled_data_path=None)
    with pytest.raises(RecognizerError) as err:
        resolve_tessdata(settings)
    assert "no valid tesseract data folder" in err.value.message


def test_extract_without_source_returns_nothing(tmp_path):
    assert extract_bundled_data(tmp_path / "t", tmp_path / "missing") == []
    assert not (tmp_path / "t").exists()
