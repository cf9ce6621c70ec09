import pytest

from fakes import FakeEngine
from leggitesto.ocr.config import RecognizerSettings
from leggitesto.ocr.recognizer import TextRecognizer


@pytest.fixture
def bundled(tmp_path):
    src = tmp_path / "bundled"
    src.mkdir()
    for lang in ("eng", "deu"):
        (src / f"{lang}.traineddata").write_bytes(b"x")
    return src


@pytest.fixture
def settings(tmp_path, bundled):
    return RecognizerSettings(app_folder=tmp_path / "app", bundled_data_path=bundled, language="eng")


@pytest.fixture
def engines():
    return []


@pytest.fixture
def make_recognizer(settings, engines):
    def factory(**engine_kwargs):
        def new_engine():
            engine = FakeEngine(**engine_kwargs)
            engines.append(engine)
            return engine

        return TextRecognizer(settings, engine_factory=new_engine)

    return factory
