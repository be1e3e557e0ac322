"""Names and locations of the pre-trained UD 2.5 models.

Nothing here touches the network; :func:`model_url` only builds the address
a caller may fetch with their own tooling.
"""

from __future__ import annotations

import os
from pathlib import Path

from udstream.errors import UnknownModelError

__all__ = [
    "AVAILABLE_MODELS",
    "MODEL_BASE_URL",
    "find_model",
    "model_filename",
    "model_url",
]

MODEL_BASE_URL = (
    "https://lindat.mff.cuni.cz/repository/xmlui/bitstream/handle/11234/1-3131"
)

_MODEL_SUFFIX = "-ud-2.5-191206.udpipe"

AVAILABLE_MODELS: tuple[str, ...] = (
    "afrikaans-afribooms",
    "ancient_greek-perseus",
    "ancient_greek-proiel",
    "arabic-padt",
    "armenian-armtdp",
    "basque-bdt",
    "belarusian-hse",
    "bulgarian-btb",
    "buryat-bdt",
    "catalan-ancora",
    "chinese-gsd",
    "chinese-gsdsimp",
    "classical_chinese-kyoto",
    "coptic-scriptorium",
    "croatian-set",
    "czech-cac",
    "czech-cltt",
    "czech-fictree",
    "czech-pdt",
    "danish-ddt",
    "dutch-alpino",
    "dutch-lassysmall",
    "english-ewt",
    "english-gum",
    "english-lines",
    "english-partut",
    "estonian-edt",
    "estonian-ewt",
    "finnish-ftb",
    "finnish-tdt",
    "french-gsd",
    "french-partut",
    "french-sequoia",
    "french-spoken",
    "galician-ctg",
    "galician-treegal",
    "german-gsd",
    "german-hdt",
    "gothic-proiel",
    "greek-gdt",
    "hebrew-htb",
    "hindi-hdtb",
    "hungarian-szeged",
    "indonesian-gsd",
    "irish-idt",
    "italian-isdt",
    "italian-partut",
    "italian-postwita",
    "italian-twittiro",
    "italian-vit",
    "japanese-gsd",
    "kazakh-ktb",
    "korean-gsd",
    "korean-kaist",
    "kurmanji-mg",
    "latin-ittb",
    "latin-perseus",
    "latin-proiel",
    "latvian-lvtb",
    "lithuanian-alksnis",
    "lithuanian-hse",
    "maltese-mudt",
    "marathi-ufal",
    "north_sami-giella",
    "norwegian-bokmaal",
    "norwegian-nynorsk",
    "norwegian-nynorsklia",
    "old_church_slavonic-proiel",
    "old_french-srcmf",
    "old_russian-torot",
    "persian-seraji",
    "polish-lfg",
    "polish-pdb",
    "polish-sz",
    "portuguese-bosque",
    "portuguese-br",
    "portuguese-gsd",
    "romanian-nonstandard",
    "romanian-rrt",
    "russian-gsd",
    "russian-syntagrus",
    "russian-taiga",
    "sanskrit-ufal",
    "scottish_gaelic-arcosg",
    "serbian-set",
    "slovak-snk",
    "slovenian-ssj",
    "slovenian-sst",
    "spanish-ancora",
    "spanish-gsd",
    "swedish-lines",
    "swedish-talbanken",
    "tamil-ttb",
    "telugu-mtg",
    "turkish-imst",
    "ukrainian-iu",
    "upper_sorbian-ufal",
    "urdu-udtb",
    "uyghur-udt",
    "vietnamese-vtb",
    "wolof-wtb",
)


def model_filename(language: str) -> str:
    """Return the file name of the model for ``language``.

    Example:
        >>> model_filename("english-ewt")
        'english-ewt-ud-2.5-191206.udpipe'
    """

    return f"{language}{_MODEL_SUFFIX}"


def _require_known(language: str) -> None:
    if language not in AVAILABLE_MODELS:
        preview = ", ".join(AVAILABLE_MODELS[:5])
        raise UnknownModelError(
            f"Unknown language {language!r}. Use one of: {preview}, ..."
        )


def model_url(language: str) -> str:
    """Return the download URL for a catalogued model.

    Raises:
        UnknownModelError: If ``language`` is not in :data:`AVAILABLE_MODELS`.
    """

    _require_known(language)
    return f"{MODEL_BASE_URL}/{model_filename(language)}"


def find_model(language: str, directory: str | os.PathLike[str]) -> Path | None:
    """Return the local model file for ``language`` under ``directory``.

    Returns ``None`` when no such file exists yet.

    Raises:
        UnknownModelError: If ``language`` is not in :data:`AVAILABLE_MODELS`.
    """

    _require_known(language)
    candidate = Path(directory).expanduser() / model_filename(language)
    return candidate if candidate.is_file() else None
