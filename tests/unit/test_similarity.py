"""Unit tests for lexical similarity."""

from wisdom.memory.similarity import SimilarityScorer, similarity, tokenize


class TestTokenize:

    def test_lowercases_and_drops_short_tokens(self):
        assert tokenize("I am SO tired of it all") == {"tired", "all"}

    def test_splits_on_punctuation(self):
        assert tokenize("work-related stress, again!") == {"work", "related", "stress", "again"}


class TestSimilarity:

    def test_identical_text(self):
        text = "Feels anxious before every team meeting"
        assert similarity(text, text) == 1.0

    def test_disjoint_text(self):
        assert similarity("anxious about deadlines", "enjoys hiking outdoors") == 0.0

    def test_empty_union_is_zero(self):
        assert similarity("", "a an") == 0.0

    def test_jaccard_over_sets(self):
        # {anxious, before, meetings} vs {anxious, before, deadlines}
        assert similarity("anxious before meetings", "anxious before deadlines") == 2 / 4

    def test_repeated_words_count_once(self):
        assert similarity("worry worry worry", "worry") == 1.0

    def test_symmetric(self):
        a = "Catastrophizes about performance reviews at work"
        b = "Often catastrophizes about reviews"
        assert similarity(a, b) == similarity(b, a)


class TestSimilarityScorer:

    def test_duplicate_requires_strictly_above_threshold(self):
        scorer = SimilarityScorer(threshold=0.5)
        assert not scorer.is_duplicate("anxious before meetings", "anxious before deadlines")
        assert scorer.is_duplicate("anxious before meetings", "anxious before meetings")
