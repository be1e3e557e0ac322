"""Owned annotation records returned to callers.

A :class:`Sentence` keeps its words column-wise and stores every word's
dependents in one shared ``children_flat`` tuple addressed by per-word
``(offset, count)`` pairs. Nothing here references the engine, so records
stay valid after their session and model are released and may be shared
across threads.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import overload

__all__ = ["MultiwordToken", "Sentence", "SentenceWords", "Word"]

_VERB_TAGS = frozenset({"VERB", "AUX"})
_NOUN_TAGS = frozenset({"NOUN", "PROPN"})


@dataclass(frozen=True, slots=True)
class MultiwordToken:
    """Surface token spanning the inclusive word range ``id_first..id_last``.

    Example:
        >>> token = MultiwordToken(form="don't", misc="", id_first=2, id_last=3)
        >>> list(token.ids)
        [2, 3]
    """

    form: str
    misc: str
    id_first: int
    id_last: int

    @property
    def ids(self) -> range:
        return range(self.id_first, self.id_last + 1)

    def covers(self, word_id: int) -> bool:
        return self.id_first <= word_id <= self.id_last


@dataclass(frozen=True, slots=True)
class Word:
    """One annotated word of a :class:`Sentence`.

    ``id`` is 1-based within the sentence and ``head`` is ``0`` for the
    sentence root. ``children`` lists the ids whose head is this word.
    """

    id: int
    form: str
    lemma: str
    upostag: str
    xpostag: str
    feats: str
    deprel: str
    deps: str
    misc: str
    head: int
    children: tuple[int, ...] = ()
    sentence_index: int = 0

    def get_feature(self, key: str) -> str | None:
        """Return the value of morphological feature ``key``, if present.

        Example:
            >>> word = Word(1, "run", "run", "VERB", "", "Mood=Imp|VerbForm=Fin",
            ...             "root", "", "", 0)
            >>> word.get_feature("Mood")
            'Imp'
            >>> word.get_feature("Tense") is None
            True
        """

        for item in self.feats.split("|"):
            name, sep, value = item.partition("=")
            if sep and name == key:
                return value
        return None

    def has_feature(self, key: str, value: str) -> bool:
        return self.get_feature(key) == value

    @property
    def is_verb(self) -> bool:
        return self.upostag in _VERB_TAGS

    @property
    def is_noun(self) -> bool:
        return self.upostag in _NOUN_TAGS

    @property
    def is_adjective(self) -> bool:
        return self.upostag == "ADJ"

    @property
    def is_punct(self) -> bool:
        return self.upostag == "PUNCT"

    @property
    def is_root(self) -> bool:
        return self.deprel == "root"

    @property
    def space_after(self) -> bool:
        """Return ``False`` only when ``misc`` carries ``SpaceAfter=No``."""

        return "SpaceAfter=No" not in self.misc.split("|")


class SentenceWords(Sequence[Word]):
    """Read-only sequence view materializing :class:`Word` on access."""

    __slots__ = ("_sentence",)

    def __init__(self, sentence: "Sentence") -> None:
        self._sentence = sentence

    def __len__(self) -> int:
        return len(self._sentence.ids)

    @overload
    def __getitem__(self, index: int) -> Word: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Word, ...]: ...

    def __getitem__(self, index: int | slice) -> Word | tuple[Word, ...]:
        if isinstance(index, slice):
            positions = range(len(self))[index]
            return tuple(self._sentence.word_at(pos) for pos in positions)
        size = len(self)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("word index out of range")
        return self._sentence.word_at(index)

    def __repr__(self) -> str:
        return f"SentenceWords({list(self)!r})"


@dataclass(frozen=True, slots=True)
class Sentence:
    """Flattened, immutable annotation of one sentence."""

    forms: tuple[str, ...] = ()
    lemmas: tuple[str, ...] = ()
    upostags: tuple[str, ...] = ()
    xpostags: tuple[str, ...] = ()
    feats: tuple[str, ...] = ()
    deprels: tuple[str, ...] = ()
    deps: tuple[str, ...] = ()
    miscs: tuple[str, ...] = ()
    ids: tuple[int, ...] = ()
    heads: tuple[int, ...] = ()
    children_flat: tuple[int, ...] = ()
    children_offsets: tuple[int, ...] = ()
    children_counts: tuple[int, ...] = ()
    multiword_tokens: tuple[MultiwordToken, ...] = ()
    comments: tuple[str, ...] = ()
    index: int = 0
    _words: SentenceWords = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        size = len(self.ids)
        columns = (
            self.forms,
            self.lemmas,
            self.upostags,
            self.xpostags,
            self.feats,
            self.deprels,
            self.deps,
            self.miscs,
            self.heads,
            self.children_offsets,
            self.children_counts,
        )
        if any(len(column) != size for column in columns):
            raise ValueError("sentence columns must all have one entry per word")
        object.__setattr__(self, "_words", SentenceWords(self))

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[Word]:
        return iter(self._words)

    @property
    def words(self) -> SentenceWords:
        return self._words

    def word_at(self, position: int) -> Word:
        """Return the word stored at 0-based ``position``."""

        return Word(
            id=self.ids[position],
            form=self.forms[position],
            lemma=self.lemmas[position],
            upostag=self.upostags[position],
            xpostag=self.xpostags[position],
            feats=self.feats[position],
            deprel=self.deprels[position],
            deps=self.deps[position],
            misc=self.miscs[position],
            head=self.heads[position],
            children=self.children_at(position),
            sentence_index=self.index,
        )

    def word(self, word_id: int) -> Word:
        """Return the word whose 1-based id is ``word_id``."""

        if not 1 <= word_id <= len(self.ids):
            raise IndexError(f"word id {word_id} out of range")
        return self.word_at(word_id - 1)

    def children_at(self, position: int) -> tuple[int, ...]:
        offset = self.children_offsets[position]
        return self.children_flat[offset : offset + self.children_counts[position]]

    def roots(self) -> tuple[Word, ...]:
        """Return words attached to the virtual root (``head == 0``)."""

        return tuple(
            self.word_at(pos)
            for pos, head in enumerate(self.heads)
            if head == 0
        )

    def multiword_token_for(self, word_id: int) -> MultiwordToken | None:
        """Return the multiword token covering ``word_id``, if any."""

        for token in self.multiword_tokens:
            if token.covers(word_id):
                return token
        return None
