"""
Tests for phase 1: grouping messages into turns.
"""
import pytest

from chatcadence.segmentation.turns import derive_turn_timeout, messages_to_turns, sort_messages

from conftest import at, msg


class TestMessagesToTurns:
    """Test turn building."""

    def test_empty(self):
        assert messages_to_turns([]) == []

    def test_single_message(self):
        m = msg("a", 0)
        turns = messages_to_turns([m])
        assert len(turns) == 1
        assert turns[0].messages == [m]
        assert turns[0].start_time == turns[0].end_time == at(0)

    def test_groups_consecutive_same_sender(self):
        """Consecutive messages from one sender form one turn."""
        messages = [
            msg(1, 0, "Hello"),
            msg(1, 30, "How are you?"),
            msg(2, 60, "Hi!"),
            msg(2, 70, "Good!"),
        ]
        turns = messages_to_turns(messages, 300)
        assert len(turns) == 2
        assert turns[0].sender_id == 1
        assert turns[0].message_count == 2
        assert turns[1].sender_id == 2
        assert turns[1].message_count == 2

    def test_splits_on_timeout(self):
        messages = [msg(1, 0, "Hello"), msg(1, 600, "Still there?")]
        turns = messages_to_turns(messages, 300)
        assert len(turns) == 2

    def test_end_to_end_scenario(self):
        """A@0, A@30, B@65, B@95, A@400 with a 60s timeout -> A, B, A."""
        messages = [msg("A", 0), msg("A", 30), msg("B", 65), msg("B", 95), msg("A", 400)]
        turns = messages_to_turns(messages, 60)
        assert [t.sender_id for t in turns] == ["A", "B", "A"]
        assert [t.message_count for t in turns] == [2, 2, 1]
        assert turns[0].start_time == at(0)
        assert turns[0].end_time == at(30)
        assert turns[2].start_time == turns[2].end_time == at(400)

    def test_gap_equal_to_timeout_does_not_split(self):
        messages = [msg(1, 0), msg(1, 60), msg(1, 120)]
        assert len(messages_to_turns(messages, 60)) == 1

    def test_zero_timeout_is_honoured(self):
        """An explicit 0 is a real timeout, not a request to derive one."""
        messages = [msg(1, 0), msg(1, 1), msg(1, 1)]
        turns = messages_to_turns(messages, 0)
        assert [t.message_count for t in turns] == [1, 2]

    def test_sorts_without_mutating_input(self):
        late, early = msg(1, 100, "late"), msg(1, 0, "early")
        messages = [late, early]
        turns = messages_to_turns(messages, 300)
        assert messages == [late, early]
        assert turns[0].messages == [early, late]

    def test_ties_keep_input_order(self):
        first, second = msg(1, 10, "first"), msg(2, 10, "second")
        turns = messages_to_turns([first, second], 300)
        assert [t.messages[0] for t in turns] == [first, second]

    def test_derived_timeout(self):
        """p70 of gaps [10, 10, 10, 4970] is 10, so only the long gap splits."""
        messages = [msg(1, 0), msg(1, 10), msg(1, 20), msg(1, 30), msg(1, 5000)]
        turns = messages_to_turns(messages)
        assert [t.message_count for t in turns] == [4, 1]

    def test_messages_are_not_copied(self, two_day_chat):
        turns = messages_to_turns(two_day_chat)
        flattened = [m for t in turns for m in t.messages]
        assert len(flattened) == len(two_day_chat)
        assert all(any(m is original for original in two_day_chat) for m in flattened)

    def test_sender_homogeneity(self, two_day_chat):
        for t in messages_to_turns(two_day_chat):
            assert {m.sender_id for m in t.messages} == {t.sender_id}
            assert t.start_time <= t.end_time

    def test_adjacent_turns_differ_or_are_far_apart(self, two_day_chat):
        """Two neighbouring turns would have merged unless split for a reason."""
        timeout = derive_turn_timeout(sort_messages(two_day_chat))
        turns = messages_to_turns(two_day_chat)
        for prev, curr in zip(turns, turns[1:]):
            gap = (curr.start_time - prev.end_time).total_seconds()
            assert prev.sender_id != curr.sender_id or gap > timeout


class TestDeriveTurnTimeout:
    """Test turn timeout derivation."""

    def test_single_message_default(self, config):
        assert derive_turn_timeout([msg(1, 0)], config) == 180

    def test_percentile_of_gaps(self, config):
        messages = [msg(1, 0), msg(2, 10), msg(1, 30), msg(2, 60), msg(1, 100)]
        # gaps 10, 20, 30, 40 -> p70 index ceil(2.8) - 1 = 2
        assert derive_turn_timeout(messages, config) == 30

    @pytest.mark.parametrize("percentile, expected", [(25, 10), (100, 40)])
    def test_percentile_from_config(self, percentile, expected):
        from chatcadence.core.config import SegmentationConfig

        config = SegmentationConfig(turn_percentile=percentile)
        messages = [msg(1, 0), msg(2, 10), msg(1, 30), msg(2, 60), msg(1, 100)]
        assert derive_turn_timeout(messages, config) == expected
