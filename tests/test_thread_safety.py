"""Concurrency tests: shared maskers and accessor compilation across threads."""

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from conftest import Person, PersonMasker

from fluentmask.core.accessor import clear_accessor_cache, get_accessor


@dataclass
class Ticket:
    id: int
    holder: str
    seat: str


class TestConcurrentMasking:
    """A registered masker is shared safely between threads."""

    def test_concurrent_mask_calls(self):
        """Parallel mask calls return the same payload as sequential ones."""
        masker = PersonMasker()
        people = [
            Person(name=f"User {i}", email=f"user{i}@example.com", phone=f"+45 00 00 {i:02d} 99", age=i)
            for i in range(40)
        ]
        expected = [masker.mask(p).masked_data for p in people]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda p: masker.mask(p).masked_data, people * 5))

        assert results == expected * 5
        assert all(json.loads(r)["email"].endswith("@example.com") for r in results)

    def test_registration_during_masking(self, person):
        """Chains appended while masking are seen whole or not at all."""
        masker = PersonMasker()

        def mask_once(_):
            return masker.mask(person).data["name"]

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(mask_once, i) for i in range(50)]
            masker.mask_for("name", lambda b: b.mask_start(4))
            names = [f.result() for f in futures]

        assert set(names) <= {"Jane Doe", "**** Doe"}
        assert masker.mask(person).data["name"] == "**** Doe"


class TestConcurrentAccessorCompilation:
    """Accessor compilation happens once per type."""

    def test_single_accessor_per_type(self):
        """Concurrent get_accessor calls return one shared instance."""
        clear_accessor_cache()

        with ThreadPoolExecutor(max_workers=8) as pool:
            accessors = list(pool.map(lambda _: get_accessor(Ticket), range(64)))

        assert all(a is accessors[0] for a in accessors)
        assert accessors[0].property_names == ("id", "holder", "seat")
