"""Tests for heuristic response ranking."""
import unittest

from hivemind.models import ModelResponse
from hivemind.ranking import RankingEngine, evaluation_reasoning, score_reasoning


def _response(model, output, confidence=None, time_ms=0):
    return ModelResponse.success(model, output, confidence=confidence, processing_time_ms=time_ms)


class TestScoring(unittest.TestCase):
    def setUp(self):
        self.engine = RankingEngine()

    def test_scenario_scores(self):
        a = _response("A", "x" * 600, confidence=0.9, time_ms=1000)
        b = _response("B", "short", confidence=0.5, time_ms=4000)
        self.assertEqual(self.engine.score(a).composite, 0.9)
        self.assertEqual(self.engine.score(b).composite, 0.26)

    def test_missing_confidence_defaults_to_half(self):
        breakdown = self.engine.score(_response("A", "hello"))
        self.assertEqual(breakdown.confidence, 0.5)

    def test_components_are_bounded(self):
        slow = self.engine.score(_response("A", "x" * 5000, confidence=1.5, time_ms=60000))
        self.assertEqual(slow.length, 1.0)
        self.assertEqual(slow.confidence, 1.0)
        self.assertEqual(slow.speed, 0.0)
        self.assertGreaterEqual(slow.composite, 0.0)
        self.assertLessEqual(slow.composite, 1.0)

    def test_score_is_monotonic(self):
        base = self.engine.score(_response("A", "x" * 100, confidence=0.5, time_ms=2000)).composite
        longer = self.engine.score(_response("A", "x" * 300, confidence=0.5, time_ms=2000)).composite
        surer = self.engine.score(_response("A", "x" * 100, confidence=0.9, time_ms=2000)).composite
        faster = self.engine.score(_response("A", "x" * 100, confidence=0.5, time_ms=500)).composite
        self.assertGreater(longer, base)
        self.assertGreater(surer, base)
        self.assertGreater(faster, base)

    def test_custom_weights(self):
        engine = RankingEngine(weights={"length": 0.0, "confidence": 1.0, "speed": 0.0})
        self.assertEqual(engine.score(_response("A", "x", confidence=0.73)).composite, 0.73)

    def test_from_config(self):
        engine = RankingEngine.from_config({"length_saturation_chars": 100, "speed_ceiling_ms": 1000})
        self.assertEqual(engine.length_score("x" * 50), 0.5)
        self.assertEqual(engine.speed_score(500), 0.5)


class TestEvaluate(unittest.TestCase):
    def setUp(self):
        self.engine = RankingEngine()

    def test_scenario_ranking(self):
        evaluation = self.engine.evaluate([
            _response("A", "x" * 600, confidence=0.9, time_ms=1000),
            _response("B", "short", confidence=0.5, time_ms=4000),
        ])
        self.assertIsNotNone(evaluation)
        self.assertEqual(evaluation.best_index, 0)
        self.assertEqual([entry.index for entry in evaluation.rankings], [0, 1])
        self.assertEqual([entry.score for entry in evaluation.rankings], [0.9, 0.26])
        self.assertIn("A provided the best response (score: 0.90)", evaluation.reasoning)
        self.assertGreaterEqual(evaluation.evaluation_time_ms, 0)

    def test_best_is_not_always_first(self):
        evaluation = self.engine.evaluate([
            _response("B", "short", confidence=0.2, time_ms=4000),
            _response("A", "x" * 600, confidence=0.9, time_ms=1000),
        ])
        self.assertEqual(evaluation.best_index, 1)
        self.assertEqual([entry.index for entry in evaluation.rankings], [1, 0])

    def test_error_and_empty_responses_are_excluded(self):
        evaluation = self.engine.evaluate([
            ModelResponse.failure("Broken", "timeout"),
            _response("Blank", "   "),
            _response("Good", "answer", confidence=0.7, time_ms=100),
        ])
        self.assertEqual(evaluation.best_index, 2)
        self.assertEqual([entry.index for entry in evaluation.rankings], [2])

    def test_nothing_qualifies(self):
        self.assertIsNone(self.engine.evaluate([]))
        self.assertIsNone(self.engine.evaluate([
            ModelResponse.failure("A", "down"),
            ModelResponse.failure("B", "down"),
        ]))

    def test_ties_keep_list_order(self):
        evaluation = self.engine.evaluate([
            _response("First", "same", confidence=0.6, time_ms=1000),
            _response("Second", "same", confidence=0.6, time_ms=1000),
            _response("Third", "same", confidence=0.6, time_ms=1000),
        ])
        self.assertEqual(evaluation.best_index, 0)
        self.assertEqual([entry.index for entry in evaluation.rankings], [0, 1, 2])

    def test_input_is_not_mutated(self):
        responses = [_response("A", "one"), _response("B", "x" * 600, confidence=1.0)]
        snapshot = list(responses)
        self.engine.evaluate(responses)
        self.assertEqual(responses, snapshot)


class TestReasoning(unittest.TestCase):
    def test_score_reasoning_descriptors(self):
        engine = RankingEngine()
        strong = _response("A", "x" * 600, confidence=0.9, time_ms=500)
        text = score_reasoning(strong, engine.score(strong))
        self.assertIn("excellent quality", text)
        self.assertIn("high confidence", text)
        self.assertIn("substantial length", text)
        self.assertIn("fast", text)

        weak = _response("B", "hi", confidence=0.1, time_ms=9000)
        text = score_reasoning(weak, engine.score(weak))
        self.assertIn("needs improvement", text)
        self.assertIn("too brief", text)
        self.assertIn("slow", text)

    def test_evaluation_reasoning_mentions_model(self):
        engine = RankingEngine()
        response = _response("Qwen-Worker-1", "x" * 42, confidence=0.8, time_ms=1200)
        text = evaluation_reasoning(response, engine.score(response))
        self.assertTrue(text.startswith("Qwen-Worker-1 provided the best response"))
        self.assertIn("42 chars", text)
        self.assertIn("1200 ms", text)


if __name__ == "__main__":
    unittest.main()
