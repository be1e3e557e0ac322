"""Flatten a native annotation tree into an owned :class:`Sentence`."""

from __future__ import annotations

from udstream.engine.base import NativeSentence
from udstream.sentence import MultiwordToken, Sentence

__all__ = ["build_sentence"]


def build_sentence(native: NativeSentence, *, index: int = 0) -> Sentence:
    """Copy ``native`` into a :class:`Sentence`.

    The engine's virtual root (native position 0) is skipped. Each word's
    dependents are appended to one shared ``children_flat`` list and the
    word records the ``(offset, count)`` of its slice. The native tree may
    be discarded or reused by the engine as soon as this returns.

    Args:
        native: Tagged and parsed native sentence.
        index: Position of the sentence within its session.
    """

    native_words = native.words
    forms: list[str] = []
    lemmas: list[str] = []
    upostags: list[str] = []
    xpostags: list[str] = []
    feats: list[str] = []
    deprels: list[str] = []
    deps: list[str] = []
    miscs: list[str] = []
    ids: list[int] = []
    heads: list[int] = []
    children_flat: list[int] = []
    children_offsets: list[int] = []
    children_counts: list[int] = []

    for position in range(1, len(native_words)):
        word = native_words[position]
        forms.append(str(word.form))
        lemmas.append(str(word.lemma))
        upostags.append(str(word.upostag))
        xpostags.append(str(word.xpostag))
        feats.append(str(word.feats))
        deprels.append(str(word.deprel))
        deps.append(str(word.deps))
        miscs.append(str(word.misc))
        ids.append(int(word.id))
        heads.append(int(word.head))

        offset = len(children_flat)
        children_offsets.append(offset)
        children_flat.extend(int(child) for child in word.children)
        children_counts.append(len(children_flat) - offset)

    multiword_tokens = tuple(
        MultiwordToken(
            form=str(token.form),
            misc=str(token.misc),
            id_first=int(token.id_first),
            id_last=int(token.id_last),
        )
        for token in native.multiword_tokens
    )

    return Sentence(
        forms=tuple(forms),
        lemmas=tuple(lemmas),
        upostags=tuple(upostags),
        xpostags=tuple(xpostags),
        feats=tuple(feats),
        deprels=tuple(deprels),
        deps=tuple(deps),
        miscs=tuple(miscs),
        ids=tuple(ids),
        heads=tuple(heads),
        children_flat=tuple(children_flat),
        children_offsets=tuple(children_offsets),
        children_counts=tuple(children_counts),
        multiword_tokens=multiword_tokens,
        comments=tuple(str(line) for line in native.comments),
        index=index,
    )
