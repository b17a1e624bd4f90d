from app.db.booking_store import BookingStore
from app.services.finance_service import get_finance_summary


def test_empty_store():
    summary = get_finance_summary()
    assert summary["totals"]["bookingCount"] == 0
    assert summary["byExperience"] == []


def test_summary_groups_by_type_experience_and_month(client, admin_headers):
    BookingStore().write_all([
        {"id": "1", "type": "zanzibar-tour", "experienceSlug": "spice-tour", "experienceTitle": "Spice Farm Tour",
         "date": "2030-01-05", "totalUSD": 225, "depositUSD": 45, "balanceUSD": 180},
        {"id": "2", "type": "zanzibar-tour", "experienceSlug": "spice-tour", "experienceTitle": "Spice Farm Tour",
         "date": "2030-01-20", "totalUsd": 100.1, "depositUSD": 20.02},
        {"id": "3", "type": "safari", "experienceSlug": "mikumi-safari", "experienceTitle": "Mikumi Safari",
         "date": "2030-02-01", "totalUSD": 1000, "depositUSD": 200, "balanceUSD": 800},
    ])
    summary = client.get("/api/v1/admin/finance", headers=admin_headers).json()

    assert summary["totals"] == {"bookingCount": 3, "totalRevenueUSD": 1325.1, "totalDepositsUSD": 265.02,
                                 "totalBalanceUSD": 1060.08}
    assert summary["byType"]["tours"]["bookingCount"] == 2
    assert summary["byType"]["packages"]["totalRevenueUSD"] == 1000
    assert [e["experienceSlug"] for e in summary["byExperience"]] == ["mikumi-safari", "spice-tour"]
    assert [(m["monthKey"], m["bookingCount"]) for m in summary["byMonth"]] == [("2030-01", 2), ("2030-02", 1)]
