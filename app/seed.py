from app.db.data_files import data_path, write_json_list

DEFAULT_TOURS = [
    {
        "slug": "stone-town-walking-tour",
        "title": "Stone Town Walking Tour",
        "shortDescription": "Winding alleys, carved doors and the old slave market with a local guide.",
        "location": "Stone Town",
        "durationHours": 3,
        "basePrice": 35,
        "pickupTime": "09:00",
        "category": "culture",
        "privateOptionAvailable": True,
    },
    {
        "slug": "mnemba-snorkelling",
        "title": "Mnemba Atoll Snorkelling",
        "shortDescription": "Boat trip to the Mnemba reef with dolphins, snorkelling gear and lunch.",
        "location": "Matemwe",
        "durationHours": 6,
        "basePrice": 75,
        "pickupTime": "07:30",
        "category": "sea",
        "privateOptionAvailable": True,
    },
    {
        "slug": "safari-blue",
        "title": "Safari Blue",
        "shortDescription": "Dhow cruise in Menai Bay with sandbank stop, seafood lunch and the Kwale lagoon.",
        "location": "Fumba",
        "durationHours": 8,
        "basePrice": 100,
        "pickupTime": "07:00",
        "category": "sea",
        "privateOptionAvailable": False,
    },
]

DEFAULT_PACKAGES = [
    {
        "slug": "mikumi-2-day-safari",
        "title": "Mikumi 2-Day Fly-In Safari",
        "shortDescription": "Fly from Zanzibar to Mikumi for two game drives and a night in a tented camp.",
        "priceFrom": 690,
        "days": [
            {"title": "Fly to Mikumi", "description": "Morning flight, afternoon game drive.", "overnight": "Tented camp"},
            {"title": "Morning drive and return", "description": "Sunrise drive, flight back to Zanzibar."},
        ],
        "includes": ["Return flights", "Park fees", "Full board"],
        "excludes": ["Tips", "Drinks"],
    },
    {
        "slug": "selous-3-day-safari",
        "title": "Nyerere (Selous) 3-Day Safari",
        "shortDescription": "Boat safari on the Rufiji river plus two days of game drives.",
        "priceFrom": 1250,
        "days": [
            {"title": "Arrival", "description": "Flight to the reserve, evening boat safari.", "overnight": "River lodge"},
            {"title": "Full day game drive", "description": "Lakes and plains with a packed lunch.", "overnight": "River lodge"},
            {"title": "Walking safari and return", "description": "Guided walk, flight back to Zanzibar."},
        ],
        "includes": ["Return flights", "Park fees", "Full board", "Boat safari"],
        "excludes": ["Tips", "Visa"],
    },
]

DEFAULT_PROMOS = [
    {"code": "WELCOME10", "type": "percent", "value": 10, "active": True},
    {"code": "KARIBU20", "type": "fixed", "value": 20, "active": True},
]


def ensure_file(name: str, items: list[dict]) -> bool:
    if data_path(name).exists():
        return False
    write_json_list(name, items)
    return True


def run():
    for name, items in (("tours", DEFAULT_TOURS), ("packages", DEFAULT_PACKAGES), ("promos", DEFAULT_PROMOS)):
        if ensure_file(name, items):
            print(f"[seed] wrote default {name} to {data_path(name)}")
        else:
            print(f"[seed] {name} already present, leaving it alone")


if __name__ == "__main__":
    run()
