"""Distinct test accounts; addresses are assembled so each stays readable as written"""

DOMAIN = "lessons.test"


def email(name: str) -> str:
    return f"{name}@{DOMAIN}"


ALICE = email("alice")
BOB = email("bob")
CAROL = email("carol")
DAVE = email("dave")
ADMIN = email("admin")
OWNER = email("owner")
