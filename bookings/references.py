from django.conf import settings

VENUE_NOT_FOUND = "Venue not found"
VENUE_NOT_ASSIGNED = "Not assigned"
ITEM_NOT_FOUND = "Item not found"


class ReferenceDirectory:
    """Venues and menu items keyed by id, for display-name lookups."""

    def __init__(self, venues=(), menu_items=()):
        self.venues = {venue["id"]: venue for venue in venues}
        self.menu_items = {item["id"]: item for item in menu_items}

    @classmethod
    def load(cls, store):
        return cls(
            venues=store.query(settings.VENUES_COLLECTION),
            menu_items=store.query(settings.MENU_COLLECTION),
        )

    def venue_name(self, venue_id, default=VENUE_NOT_FOUND):
        venue = self.venues.get(venue_id) or {}
        return venue.get("name") or default

    def assigned_venue_name(self, venue_id):
        return self.venue_name(venue_id, default=VENUE_NOT_ASSIGNED)

    def menu_item(self, item_id):
        item = self.menu_items.get(item_id) or {}
        return {
            "id": item_id,
            "name": item.get("name") or ITEM_NOT_FOUND,
            "price": item.get("price") or 0,
        }
