from dataclasses import dataclass, field

from leggitesto.ocr.engine import TesseractEngine
from leggitesto.ocr.errors import TesseractEngineError


@dataclass
class FakeEngine(TesseractEngine):
    """Engine handle che non invoca tesseract: restituisce risultati preimpostati."""
    text: str = ""
    words: list = field(default_factory=list)
    fail: bool = False
    seen_images: list = field(default_factory=list)
    seen_levels: list = field(default_factory=list)

    def init(self) -> None:
        self.version = "fake"

    def recognize_text(self, image):
        self.seen_images.append(image)
        if self.fail:
            raise TesseractEngineError("boom")
        return self.text

    def recognize_words(self, image, level):
        self.seen_images.append(image)
        self.seen_levels.append(level)
        if self.fail:
            raise TesseractEngineError("boom")
        return list(self.words)
