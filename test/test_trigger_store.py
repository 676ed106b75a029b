"""Tests for the pending trigger slot"""

import pytest

from alarm_schedule.models import AlarmPayload, PendingTrigger
from alarm_schedule.store import TriggerStore


def _trigger(fire_at_ms: int = 1_700_000_000_000, title: str = "Focus") -> PendingTrigger:
  return PendingTrigger(fire_at_ms=fire_at_ms, payload=AlarmPayload(title=title))


def test_empty_store_has_no_trigger(store):
  assert store.get() is None
  assert store.clear() is None
  assert store.take() is None


def test_set_then_get(store):
  trigger = _trigger()
  store.set(trigger)

  stored = store.get()
  assert stored == trigger
  assert stored.payload.title == "Focus"


def test_set_replaces_previous_trigger(store):
  first = _trigger(title="first")
  second = _trigger(title="second")
  store.set(first)
  store.set(second)

  assert store.get().trigger_id == second.trigger_id


def test_clear_returns_previous_and_empties_slot(store):
  trigger = _trigger()
  store.set(trigger)

  assert store.clear() == trigger
  assert store.get() is None


def test_take_requires_matching_id(store):
  trigger = _trigger()
  store.set(trigger)

  assert store.take("someone-else") is None
  assert store.get() == trigger

  assert store.take(trigger.trigger_id) == trigger
  assert store.get() is None
  assert store.take(trigger.trigger_id) is None


def test_trigger_survives_new_store_instance(tmp_path):
  trigger = _trigger()
  TriggerStore(tmp_path).set(trigger)

  assert TriggerStore(tmp_path).get() == trigger


def test_unreadable_file_is_treated_as_empty(store):
  store.data_dir.mkdir(parents=True, exist_ok=True)
  store.path.write_text("pending_trigger: [not, a, trigger\n")
  assert store.get() is None

  store.path.write_text("pending_trigger:\n  fire_at_ms: soon\n")
  assert store.get() is None


@pytest.mark.parametrize("content", ["garbage\n", "- pending_trigger\n- other\n", "42\n"])
def test_non_mapping_file_is_treated_as_empty(store, content):
  store.data_dir.mkdir(parents=True, exist_ok=True)
  store.path.write_text(content)

  assert store.get() is None
  assert store.take() is None
  assert store.clear() is None

  # the slot is usable again afterwards
  trigger = _trigger()
  store.set(trigger)
  assert store.get() == trigger


def test_write_leaves_no_temp_file(store):
  store.set(_trigger())
  assert store.path.exists()
  assert not store.path.with_suffix(".tmp").exists()
