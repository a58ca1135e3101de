"""Unit tests for question activation and dynamic choices."""

from app.layers.layer1_intake import active_questions, choices_for, is_active
from app.layers.layer1_intake.dependency_resolver import answer_values, format_scalar


def _ids(questions):
    return [q.id for q in questions]


class TestIsActive:
    def test_question_without_dependency_is_always_active(self, small_catalog):
        assert is_active(small_catalog.get("email"), {}, small_catalog)

    def test_dependency_unanswered_is_inactive(self, small_catalog):
        assert not is_active(small_catalog.get("hasShop"), {"projectType": "web"}, small_catalog)

    def test_multi_choice_dependency_uses_intersection(self, small_catalog):
        answers = {"projectType": "web", "features": ["blog", "shop"]}
        assert is_active(small_catalog.get("hasShop"), answers, small_catalog)

    def test_predicate_not_satisfied(self, small_catalog):
        answers = {"projectType": "web", "features": ["blog"]}
        assert not is_active(small_catalog.get("hasShop"), answers, small_catalog)

    def test_inactive_prerequisite_deactivates_dependents_transitively(self, small_catalog):
        # hasShop=yes가 남아 있어도 features에 shop이 없으면 shopSize는 비활성
        answers = {"projectType": "web", "features": ["blog"], "hasShop": "yes"}
        assert not is_active(small_catalog.get("shopSize"), answers, small_catalog)


class TestActiveQuestions:
    def test_initial_sequence(self, small_catalog):
        assert _ids(active_questions(small_catalog, {})) == ["projectType", "features", "email"]

    def test_full_branch(self, small_catalog):
        answers = {"projectType": "web", "features": ["shop"], "hasShop": "yes"}
        assert _ids(active_questions(small_catalog, answers)) == [
            "projectType",
            "features",
            "hasShop",
            "shopSize",
            "email",
        ]

    def test_default_catalog_domain_follow_up(self, default_catalog):
        with_site = _ids(active_questions(default_catalog, {"hasCurrentSite": "yes"}))
        without_site = _ids(active_questions(default_catalog, {"hasCurrentSite": "no"}))
        assert "currentSite" in with_site and "hasDomain" not in with_site
        assert "hasDomain" in without_site and "currentSite" not in without_site


class TestChoicesFor:
    def test_static_choices(self, small_catalog):
        values = [c.value for c in choices_for(small_catalog.get("projectType"), {})]
        assert values == ["web", "app", "other"]

    def test_dynamic_choices_follow_source_answer(self, small_catalog):
        features = small_catalog.get("features")
        assert [c.value for c in choices_for(features, {"projectType": "app"})] == ["auth", "api"]

    def test_dynamic_choices_fallback(self, small_catalog):
        features = small_catalog.get("features")
        assert [c.value for c in choices_for(features, {})] == ["custom"]
        assert [c.value for c in choices_for(features, {"projectType": "mystery"})] == ["custom"]

    def test_default_budget_options_by_project_type(self, default_catalog):
        budget = default_catalog.get("budget")
        values = [c.value for c in choices_for(budget, {"projectType": "ecommerce"})]
        assert values[0] == "5k-10k"
        assert values[-1] == "discuss"


def test_format_scalar_drops_integral_fraction():
    assert format_scalar(3.0) == "3"
    assert format_scalar(2.5) == "2.5"
    assert answer_values(["a", "b"]) == {"a", "b"}
