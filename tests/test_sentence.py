"""Tests for :mod:`udstream.sentence`."""

from __future__ import annotations

import dataclasses

import pytest

from udstream.sentence import MultiwordToken, Sentence, Word


def _sentence() -> Sentence:
    return Sentence(
        forms=("Dogs", "bark", "loudly", "."),
        lemmas=("dog", "bark", "loudly", "."),
        upostags=("NOUN", "VERB", "ADV", "PUNCT"),
        xpostags=("NNS", "VBP", "RB", "."),
        feats=("Number=Plur", "Mood=Ind|Tense=Pres", "", ""),
        deprels=("nsubj", "root", "advmod", "punct"),
        deps=("", "", "", ""),
        miscs=("", "", "SpaceAfter=No", "SpaceAfter=No"),
        ids=(1, 2, 3, 4),
        heads=(2, 0, 2, 2),
        children_flat=(1, 3, 4),
        children_offsets=(0, 0, 3, 3),
        children_counts=(0, 3, 0, 0),
        comments=("# text = Dogs bark loudly.",),
        index=2,
    )


def test_words_view_materializes_records() -> None:
    sentence = _sentence()

    words = sentence.words
    verb = words[1]

    assert len(words) == 4
    assert [word.form for word in sentence] == ["Dogs", "bark", "loudly", "."]
    assert verb == sentence.word(2)
    assert verb.children == (1, 3, 4)
    assert verb.sentence_index == 2
    assert words[-1].form == "."
    assert [word.id for word in words[1:3]] == [2, 3]


def test_words_view_bounds() -> None:
    sentence = _sentence()

    with pytest.raises(IndexError):
        sentence.words[4]
    with pytest.raises(IndexError):
        sentence.word(0)
    with pytest.raises(IndexError):
        sentence.word(5)


def test_word_classification_helpers() -> None:
    noun, verb, adverb, punct = _sentence().words

    assert noun.is_noun and not noun.is_verb
    assert verb.is_verb and verb.is_root
    assert not adverb.is_adjective
    assert punct.is_punct and not punct.is_root
    assert noun.space_after
    assert not adverb.space_after


def test_word_features() -> None:
    verb = _sentence().word(2)

    assert verb.get_feature("Tense") == "Pres"
    assert verb.has_feature("Mood", "Ind")
    assert not verb.has_feature("Mood", "Imp")
    assert verb.get_feature("Number") is None
    assert _sentence().word(3).get_feature("Degree") is None


def test_roots_returns_words_attached_to_virtual_root() -> None:
    roots = _sentence().roots()

    assert [word.form for word in roots] == ["bark"]


def test_sentence_is_immutable_and_compares_by_value() -> None:
    sentence = _sentence()

    with pytest.raises(dataclasses.FrozenInstanceError):
        sentence.index = 9  # type: ignore[misc]
    assert sentence == _sentence()


def test_sentence_rejects_ragged_columns() -> None:
    with pytest.raises(ValueError):
        Sentence(forms=("a",), ids=(1, 2))


def test_multiword_token_span() -> None:
    token = MultiwordToken(form="au", misc="", id_first=3, id_last=4)

    assert list(token.ids) == [3, 4]
    assert token.covers(4)
    assert not token.covers(5)


def test_adjective_and_auxiliary_tags() -> None:
    adjective = Word(1, "big", "big", "ADJ", "JJ", "", "amod", "", "", 2)
    auxiliary = Word(2, "is", "be", "AUX", "VBZ", "", "cop", "", "", 3)

    assert adjective.is_adjective
    assert auxiliary.is_verb
