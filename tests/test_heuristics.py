"""
Unit tests for the routing and parsing heuristics.
"""

from search_assistant.agent.heuristics import (
    classify_needs_search,
    extract_search_query,
    is_direct_search_query,
    segment_into_results,
)


class TestClassifyNeedsSearch:
    def test_keyword_stem_matches(self) -> None:
        assert classify_needs_search("Найди информацию о котах")
        assert classify_needs_search("Выполнить поиск по теме")
        assert classify_needs_search("Search the web for recent releases")

    def test_case_insensitive(self) -> None:
        assert classify_needs_search("ПОИСК свежих новостей")

    def test_plain_step_does_not_need_search(self) -> None:
        assert not classify_needs_search("Ответь вежливо")
        assert not classify_needs_search("")

    def test_custom_keywords(self) -> None:
        assert classify_needs_search("google it", keywords=("google",))
        assert not classify_needs_search("Найти котов", keywords=("google",))


class TestExtractSearchQuery:
    def test_skips_rest_of_keyword_word(self) -> None:
        assert extract_search_query("Найди информацию о котах") == "о котах"

    def test_strips_leading_colon(self) -> None:
        assert extract_search_query("Выполнить поиск: погода в Москве") == "погода в Москве"

    def test_falls_back_to_line_when_nothing_follows(self) -> None:
        assert extract_search_query("  Поиск  ") == "Поиск"
        assert extract_search_query("Нужен поиск:") == "Нужен поиск:"

    def test_no_keyword_returns_line(self) -> None:
        assert extract_search_query("Ответь вежливо") == "Ответь вежливо"

    def test_position_taken_from_original_text(self) -> None:
        # "İ".lower() is two characters long
        assert extract_search_query("İİ search weather", ("search",)) == "weather"
        assert extract_search_query("SEARCH: weather", ("search",)) == "weather"


class TestDirectSearchQuery:
    def test_direct_keywords(self) -> None:
        assert is_direct_search_query("Найди рецепт борща")
        assert is_direct_search_query("узнай курс доллара")
        assert is_direct_search_query("Please look up the weather in Oslo")

    def test_regular_questions_go_to_agent(self) -> None:
        assert not is_direct_search_query("Привет, как дела?")
        assert not is_direct_search_query("Расскажи о котах")


class TestSegmentIntoResults:
    def test_blank_text_has_no_results(self) -> None:
        assert segment_into_results("") == []
        assert segment_into_results("  \n ") == []

    def test_text_without_markers_is_one_result(self) -> None:
        text = "Коты спят до 16 часов в сутки.\nЭто нормально."
        results = segment_into_results(text)
        assert len(results) == 1
        assert results[0].snippet == text
        assert results[0].url is None and results[0].title is None

    def test_list_and_url_lines_start_new_results(self) -> None:
        text = (
            "Вот что нашлось:\n"
            "1. [Python](https://python.org) - официальный сайт\n"
            "Язык программирования.\n"
            "2. Документация https://docs.python.org/3/ справка\n"
            "- Просто пункт без ссылки"
        )
        results = segment_into_results(text)
        assert len(results) == 4
        assert results[0].snippet == "Вот что нашлось:"
        assert results[1].title == "Python"
        assert results[1].url == "https://python.org"
        assert results[1].source == "python.org"
        assert results[1].snippet == "официальный сайт\nЯзык программирования."
        assert results[2].title == "Документация"
        assert results[2].url == "https://docs.python.org/3/"
        assert results[2].snippet == "справка"
        assert results[3].url is None
        assert results[3].snippet == "Просто пункт без ссылки"

    def test_url_only_line_uses_url_as_snippet(self) -> None:
        results = segment_into_results("https://www.example.com/page")
        assert len(results) == 1
        assert results[0].snippet == "https://www.example.com/page"
        assert results[0].source == "example.com"
