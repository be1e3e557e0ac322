"""Tests for :mod:`udstream.builder`."""

from __future__ import annotations

from types import SimpleNamespace

from udstream.builder import build_sentence
from udstream.sentence import MultiwordToken


def _fox_tree(native_sentence):
    native = native_sentence(["The", "fox", "jumps", "."], index=4)
    heads = {1: 2, 2: 3, 3: 0, 4: 3}
    deprels = {1: "det", 2: "nsubj", 3: "root", 4: "punct"}
    tags = {1: "DET", 2: "NOUN", 3: "VERB", 4: "PUNCT"}
    for word in native.words[1:]:
        word.head = heads[word.id]
        word.deprel = deprels[word.id]
        word.upostag = tags[word.id]
        word.lemma = word.form.lower()
        native.words[word.head].children.append(word.id)
    native.words[3].feats = "Mood=Ind|Tense=Pres"
    native.words[3].misc = "SpaceAfter=No"
    return native


def test_build_sentence_skips_virtual_root_and_copies_fields(native_sentence) -> None:
    sentence = build_sentence(_fox_tree(native_sentence), index=4)

    assert len(sentence) == 4
    assert sentence.index == 4
    assert sentence.forms == ("The", "fox", "jumps", ".")
    assert sentence.ids == (1, 2, 3, 4)
    assert sentence.heads == (2, 3, 0, 3)
    assert sentence.deprels == ("det", "nsubj", "root", "punct")
    assert sentence.upostags == ("DET", "NOUN", "VERB", "PUNCT")
    assert sentence.feats[2] == "Mood=Ind|Tense=Pres"
    assert sentence.miscs[2] == "SpaceAfter=No"


def test_children_are_flattened_with_offsets(native_sentence) -> None:
    sentence = build_sentence(_fox_tree(native_sentence))

    assert sentence.children_flat == (1, 2, 4)
    assert sentence.children_counts == (0, 1, 2, 0)
    assert sentence.children_at(1) == (1,)
    assert sentence.children_at(2) == (2, 4)
    assert sentence.children_at(0) == ()
    for position in range(len(sentence)):
        offset = sentence.children_offsets[position]
        assert offset + sentence.children_counts[position] <= len(
            sentence.children_flat
        )


def test_children_agree_with_heads(native_sentence) -> None:
    sentence = build_sentence(_fox_tree(native_sentence))

    for word in sentence.words:
        for child_id in word.children:
            assert sentence.word(child_id).head == word.id


def test_build_sentence_owns_its_data(native_sentence) -> None:
    native = _fox_tree(native_sentence)
    sentence = build_sentence(native)

    native.words[1].form = "A"
    native.words[3].children.clear()

    assert sentence.forms[0] == "The"
    assert sentence.word(3).children == (2, 4)


def test_build_sentence_copies_multiword_tokens_and_comments(
    native_sentence,
) -> None:
    native = native_sentence(["do", "n't", "go"])
    native.multiword_tokens.append(
        SimpleNamespace(id_first=1, id_last=2, form="don't", misc="")
    )
    native.comments.extend(["# sent_id = 1", "# text = don't go"])

    sentence = build_sentence(native)

    assert sentence.multiword_tokens == (
        MultiwordToken(form="don't", misc="", id_first=1, id_last=2),
    )
    assert sentence.comments == ("# sent_id = 1", "# text = don't go")
    assert sentence.multiword_token_for(2).form == "don't"
    assert sentence.multiword_token_for(3) is None


def test_empty_native_sentence_builds_empty_record(native_sentence) -> None:
    sentence = build_sentence(native_sentence([]))

    assert len(sentence) == 0
    assert list(sentence.words) == []
    assert sentence.children_flat == ()
