from datetime import datetime

from app.services.home_config import default_sections, merge_sections
from app.services.payments import payment_signature, verify_payment_signature
from app.services.slugs import slugify, unique_slug
from app.services.stats import fill_monthly_gaps, resolve_year


# stats
def test_monthly_stats_always_has_twelve_ascending_months():
    stats = fill_monthly_gaps([(3, 2, 500.0), (11, 1, 100)])
    assert [s["month"] for s in stats] == list(range(1, 13))
    assert stats[2] == {"month": 3, "count": 2, "revenue": 500.0}
    assert stats[10] == {"month": 11, "count": 1, "revenue": 100}
    assert sum(s["count"] for s in stats) == 3
    assert stats[0] == {"month": 1, "count": 0, "revenue": 0}


def test_monthly_stats_skip_unusable_months():
    stats = fill_monthly_gaps([(None, 4, 10), (13, 1, 1), ("2", "3", "30.5")])
    assert sum(s["count"] for s in stats) == 3
    assert stats[1]["revenue"] == 30.5


def test_resolve_year_defaults_to_current():
    today = datetime(2026, 10, 19)
    assert resolve_year("2024", today) == 2024
    assert resolve_year(None, today) == 2026
    assert resolve_year("last year", today) == 2026
    assert resolve_year("0", today) == 2026


# slugs
def test_slugify():
    assert slugify("Kerala Backwaters & Hills!") == "kerala-backwaters-hills"
    assert slugify("  ---  ") == "package"


def test_unique_slug_appends_counter():
    taken = {"goa", "goa-1"}
    assert unique_slug("Goa", taken.__contains__) == "goa-2"
    assert unique_slug("Ladakh", taken.__contains__) == "ladakh"


# payments
def test_payment_signature_round_trip():
    signature = payment_signature("order_1", "pay_1")
    assert verify_payment_signature("order_1", "pay_1", signature)
    assert not verify_payment_signature("order_1", "pay_2", signature)
    assert not verify_payment_signature("order_1", "pay_1", "")


def test_payment_signature_depends_on_secret():
    assert payment_signature("o", "p", secret="a") != payment_signature("o", "p", secret="b")


# home config
def test_merge_sections_touches_only_given_sections():
    current = default_sections()
    merged = merge_sections(current, {"heroSection": {"heading": "Hello"}, "unknown": {"x": 1}})
    assert merged["heroSection"]["heading"] == "Hello"
    assert merged["heroSection"]["ctaText"] == current["heroSection"]["ctaText"]
    assert merged["aboutSection"] == current["aboutSection"]
    assert "unknown" not in merged


def test_merge_sections_replaces_testimonial_list_and_keeps_blank_headings():
    current = default_sections()
    update = {"testimonialsSection": {"heading": "", "testimonials": [{"name": "Asha", "rating": 5}]}}
    merged = merge_sections(current, update)
    assert merged["testimonialsSection"]["testimonials"] == [{"name": "Asha", "rating": 5}]
    assert merged["testimonialsSection"]["heading"] == current["testimonialsSection"]["heading"]


def test_default_sections_are_independent_copies():
    first = default_sections()
    first["seo"]["keywords"].append("changed")
    assert "changed" not in default_sections()["seo"]["keywords"]
