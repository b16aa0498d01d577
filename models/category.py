from dataclasses import dataclass

from utils.constants import DEFAULT_CATEGORIES, DEFAULT_EMOJI


@dataclass(frozen=True)
class Category:
    value: str
    label: str
    emoji: str
    type: str           # 'income' | 'expense'

    @property
    def display(self) -> str:
        return f"{self.emoji} {self.label}"


PRESET_CATEGORIES = [Category(**c) for c in DEFAULT_CATEGORIES]


def emoji_for(category: str) -> str:
    """Emoji of a preset category value, or the generic money bag."""
    for c in PRESET_CATEGORIES:
        if c.value == category:
            return c.emoji
    return DEFAULT_EMOJI


def categories_for(type_: str) -> list[Category]:
    return [c for c in PRESET_CATEGORIES if c.type == type_]
