"""
Header synonym table.

Keywords are keyed by canonical field id and feed both the fuzzy
index and the keyword bonus in field detection. The table is
read-only process-wide configuration; fields without an entry
simply have no keywords.
"""

from types import MappingProxyType

FIELD_KEYWORDS = MappingProxyType({
    "firstName": ("first", "fname", "firstname", "given", "forename", "christian"),
    "lastName": ("last", "lname", "lastname", "surname", "family", "sur"),
    "fullName": ("name", "full", "fullname", "complete", "display"),
    "email": ("email", "mail", "e-mail", "emailaddress", "email_address", "electronic"),
    "phone": ("phone", "tel", "telephone", "mobile", "cell", "contact", "number", "cellular"),
    "workPhone": ("work", "office", "business", "company"),
    "homePhone": ("home", "personal", "residential"),
    "address": ("address", "street", "location", "addr"),
    "city": ("city", "town", "municipality", "locality"),
    "state": ("state", "province", "region", "territory"),
    "zipCode": ("zip", "postal", "postcode", "zipcode", "code"),
    "country": ("country", "nation", "nationality"),
    "company": ("company", "organization", "business", "employer", "firm"),
    "title": ("title", "position", "job", "role", "designation"),
    "agentUid": ("agent", "assigned", "owner", "rep", "representative", "sales", "manager"),
    "createdOn": ("created", "createdon", "date", "added", "timestamp", "time", "imported"),
    "updatedOn": ("updated", "modified", "changed", "edited", "last"),
    "notes": ("notes", "comments", "remarks", "description", "memo"),
    "tags": ("tags", "categories", "labels", "keywords"),
    "status": ("status", "state", "condition", "stage"),
    "source": ("source", "origin", "channel", "referral", "lead"),
})


def get_field_keywords(field_id: str) -> tuple[str, ...]:
    """Keywords for a field id, empty for custom fields."""
    return FIELD_KEYWORDS.get(field_id, ())
