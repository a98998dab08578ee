"""Tests for skill normalization, splitting and loose matching."""

from hypothesis import given, strategies as st

from careerconnect.services.matching import (
    filter_matching,
    matches,
    normalize_token,
    normalized_set,
    split_skills,
)

skill_text = st.text(alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 +#.-_/", max_size=20)


class TestNormalizeToken:
    def test_strips_case_and_punctuation(self):
        assert normalize_token("React.js") == "reactjs"
        assert normalize_token("  Node JS ") == "nodejs"
        assert normalize_token("C#") == "c"

    def test_plus_is_not_preserved(self):
        assert normalize_token("C++") == "c"
        assert normalize_token("C++") == normalize_token("C")

    def test_non_string_becomes_empty(self):
        assert normalize_token(None) == ""
        assert normalize_token(42) == ""
        assert normalize_token(["python"]) == ""

    @given(skill_text)
    def test_output_alphabet_and_idempotence(self, token):
        normalized = normalize_token(token)
        assert all(ch in "abcdefghijklmnopqrstuvwxyz0123456789" for ch in normalized)
        assert normalize_token(normalized) == normalized

    def test_normalized_set_drops_empties(self):
        assert normalized_set(["React", "+++", "", None, "react"]) == {"react"}
        assert normalized_set(None) == set()


class TestSplitSkills:
    def test_comma_string(self):
        assert split_skills("React, Node ,, Python") == ["React", "Node", "Python"]

    def test_json_array_string(self):
        assert split_skills('["Go", " Rust ", "Go"]') == ["Go", "Rust"]

    def test_list_dedupes_in_order(self):
        assert split_skills(["SQL", "Docker", "SQL", "  "]) == ["SQL", "Docker"]

    def test_empty_inputs(self):
        assert split_skills(None) == []
        assert split_skills("") == []
        assert split_skills([]) == []
        assert split_skills(17) == []

    def test_malformed_json_falls_back_to_commas(self):
        assert split_skills("[React, Vue") == ["[React", "Vue"]


class TestMatches:
    def test_substring_either_direction(self):
        assert matches(["react"], ["ReactJS"])
        assert matches(["ReactJS"], ["react"])

    def test_loose_java_javascript(self):
        assert matches(["java"], ["JavaScript"])

    def test_no_overlap(self):
        assert not matches(["python"], ["Go", "Rust"])

    def test_empty_sides_never_match(self):
        assert not matches([], ["python"])
        assert not matches(["python"], [])
        assert not matches(["+++"], ["python"])

    @given(st.lists(skill_text, max_size=5), st.lists(skill_text, max_size=5))
    def test_symmetric(self, a, b):
        assert matches(a, b) == matches(b, a)

    @given(st.lists(skill_text, min_size=1, max_size=5))
    def test_any_nonempty_token_matches_itself(self, skills):
        if normalized_set(skills):
            assert matches(skills, skills)


class TestFilterMatching:
    JOBS = [
        {"_id": 1, "skills": ["React", "CSS"]},
        {"_id": 2, "skills": ["Python"]},
        {"_id": 3, "skills": []},
        {"_id": 4},
    ]

    def test_keeps_matching_jobs_in_order(self):
        assert [j["_id"] for j in filter_matching(["css", "py"], self.JOBS)] == [1, 2]

    def test_no_requested_skills_no_jobs(self):
        assert filter_matching([], self.JOBS) == []
        assert filter_matching(["   "], self.JOBS) == []

    @given(st.lists(skill_text, max_size=4))
    def test_result_is_subset(self, requested):
        result = filter_matching(requested, self.JOBS)
        assert all(job in self.JOBS for job in result)
        assert all(matches(requested, job.get("skills") or []) for job in result)
