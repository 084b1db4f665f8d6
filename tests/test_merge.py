"""Tests for merging provider results into a ScanResult."""

from itertools import permutations

from subsweep.errors import FailureReason
from subsweep.schemas import ProviderResult
from subsweep.services.merge import merge_results


def _example_results():
    return [
        ProviderResult.success("a", ["*.a.example.com", "A.EXAMPLE.COM"]),
        ProviderResult.success("b", ["a.example.com", "b.example.com"]),
    ]


def test_merge_deduplicates_normalizes_and_sorts():
    result = merge_results(_example_results(), "example.com")

    assert result.records == ["a.example.com", "b.example.com"]
    assert result.count == 2
    assert result.failures == []
    assert not result.all_failed


def test_merge_tracks_sources_per_record():
    result = merge_results(_example_results(), "example.com")

    assert result.sources == {"a.example.com": ["a", "b"], "b.example.com": ["b"]}


def test_merge_is_idempotent():
    results = _example_results() + [ProviderResult.failure("c", FailureReason.TIMEOUT, "slow")]
    assert merge_results(results, "example.com") == merge_results(results, "example.com")


def test_merge_records_independent_of_result_order():
    results = [
        ProviderResult.success("a", ["z.example.com", "m.example.com"]),
        ProviderResult.success("b", ["M.example.com", "a.example.com"]),
        ProviderResult.failure("c", FailureReason.RATE_LIMITED),
    ]
    expected = ["a.example.com", "m.example.com", "z.example.com"]

    for ordering in permutations(results):
        assert merge_results(list(ordering), "example.com").records == expected


def test_merge_keeps_failures_in_input_order():
    results = [
        ProviderResult.failure("crtsh", FailureReason.TIMEOUT, "no response within 5.0s"),
        ProviderResult.success("hackertarget", []),
        ProviderResult.failure("rapiddns", FailureReason.UNPARSEABLE_RESPONSE, "no result table in page"),
    ]

    result = merge_results(results, "example.com")

    assert [(f.provider, f.reason) for f in result.failures] == [
        ("crtsh", FailureReason.TIMEOUT),
        ("rapiddns", FailureReason.UNPARSEABLE_RESPONSE),
    ]
    assert result.failures[0].detail == "no response within 5.0s"
    assert not result.all_failed


def test_merge_drops_invalid_and_out_of_scope_names():
    results = [ProviderResult.success("a", ["", "localhost", "x.other.org", "bad host", "ok.example.com"])]

    assert merge_results(results, "example.com").records == ["ok.example.com"]


def test_merge_without_domain_keeps_any_valid_hostname():
    results = [ProviderResult.success("a", ["x.other.org", "ok.example.com"])]

    assert merge_results(results).records == ["ok.example.com", "x.other.org"]


def test_merge_empty_success_is_not_total_failure():
    result = merge_results([ProviderResult.success("a", []), ProviderResult.success("b", [])])

    assert result.records == []
    assert result.count == 0
    assert not result.all_failed


def test_merge_all_failed_flag():
    results = [
        ProviderResult.failure("a", FailureReason.TRANSPORT_ERROR),
        ProviderResult.failure("b", FailureReason.TIMEOUT),
    ]

    result = merge_results(results)

    assert result.all_failed
    assert len(result.failures) == 2
