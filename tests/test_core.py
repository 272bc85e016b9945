"""
Tests for core lazy iterator functionality.
"""

import logging

import pytest

from lazyiter import Iter, Nothing, PullResult, Some, into_iter, iter_range, zip_iters


def tracked(items, log, name="closed"):
    """Generator that records when it is closed."""
    try:
        yield from items
    finally:
        log.append(name)


def counting(items, pulls):
    """Generator that records every element handed out."""
    for item in items:
        pulls.append(item)
        yield item


class Stubborn:
    """Pull-protocol source that still yields a value when forced to stop."""

    def next(self):
        return PullResult.produced(1)

    def force_return(self, value=None):
        return PullResult.produced("late")

    def force_throw(self, error):
        return PullResult.produced("late")


class TestStages:
    """Tests for the chainable stages."""

    def test_map(self):
        """Test map operation."""
        result = into_iter([1, 2, 3]).map(lambda x: x * 2).collect()
        assert result == [2, 4, 6]

    def test_filter_discards_when_true(self):
        """Test that filter drops the elements its predicate accepts."""
        result = into_iter([1, 2, 3, 4]).filter(lambda x: x % 2 == 0).collect()
        assert result == [1, 3]

    def test_filter_everything_discarded(self):
        """Test filter whose predicate is always true."""
        result = iter_range(10).filter(lambda x: True).collect()
        assert result == []

    def test_filter_map(self):
        """Test filter_map keeps and unwraps Some payloads."""
        result = (
            into_iter(["1", "x", "3"])
            .filter_map(lambda s: Some(int(s)) if s.isdigit() else Nothing)
            .collect()
        )
        assert result == [1, 3]

    def test_take(self):
        """Test take stops after n elements."""
        pulls = []
        result = into_iter(counting([1, 2, 3, 4], pulls)).take(2).collect()
        assert result == [1, 2]
        assert pulls == [1, 2]

    def test_take_zero_never_pulls(self):
        """Test take(0) yields nothing and never touches upstream."""
        pulls = []
        result = into_iter(counting([1, 2, 3], pulls)).take(0).collect()
        assert result == []
        assert pulls == []

    def test_take_more_than_available(self):
        """Test take with a count larger than the source."""
        assert into_iter([1, 2]).take(10).collect() == [1, 2]

    def test_take_negative(self):
        """Test that a negative count behaves like zero."""
        assert into_iter([1, 2]).take(-3).collect() == []

    def test_enumerate(self):
        """Test enumerate pairs indices with elements."""
        result = into_iter(["a", "b", "c"]).enumerate().collect()
        assert result == [(0, "a"), (1, "b"), (2, "c")]

    def test_enumerate_start(self):
        """Test enumerate with a custom start."""
        result = into_iter(["a", "b", "c"]).enumerate(5).collect()
        assert result == [(5, "a"), (6, "b"), (7, "c")]

    def test_zip_polls_every_member(self):
        """Test zip stops at the shortest member but polls all of them."""
        a = into_iter([1, 2, 3])
        b = into_iter([10, 20, 30, 40, 50])
        assert a.zip(b).collect() == [(1, 10), (2, 20), (3, 30)]
        # The fourth round consumed 40 from b before reporting exhaustion.
        assert b.next().value == 50

    def test_zip_reports_partial_row(self):
        """Test the exhausted round carries the partial row."""
        z = zip_iters([1], ["a", "b"])
        assert z.next() == PullResult.produced((1, "a"))
        assert z.next() == PullResult.exhausted((None, "b"))

    def test_zip_three_way(self):
        """Test zipping three sources."""
        result = zip_iters([1, 2], "ab", iter_range(100)).collect()
        assert result == [(1, "a", 0), (2, "b", 1)]

    def test_zip_without_members(self):
        """Test that an empty zip is exhausted immediately."""
        assert zip_iters().collect() == []

    def test_long_pipeline(self):
        """Test a long pipeline."""
        result = (
            iter_range(100)
            .map(lambda x: x + 1)
            .filter(lambda x: x % 2 == 1)
            .map(lambda x: x * 2)
            .filter(lambda x: x >= 100)
            .map(lambda x: x - 1)
            .sum()
        )
        expected = sum(
            ((x + 1) * 2) - 1
            for x in range(100)
            if (x + 1) % 2 == 0 and (x + 1) * 2 < 100
        )
        assert result == expected

    def test_laziness(self):
        """Test that building a chain pulls nothing."""
        pulls = []
        chain = into_iter(counting([1, 2, 3], pulls)).map(lambda x: x).take(2)
        assert pulls == []
        chain.next()
        assert pulls == [1]


class TestTerminalOperations:
    """Tests for terminal and aggregate operations."""

    def test_opt_next(self):
        """Test opt_next wraps the next element."""
        it = into_iter([1])
        assert it.opt_next() == Some(1)
        assert it.opt_next() is Nothing

    def test_nth(self):
        """Test nth counts from one."""
        assert into_iter([10, 20, 30]).nth(1) == Some(10)
        assert into_iter([10, 20, 30]).nth(2) == Some(20)
        assert into_iter([10, 20, 30]).nth(0) == Some(10)
        assert into_iter([10, 20, 30]).nth(5) is Nothing

    def test_all(self):
        """Test all over booleans."""
        assert into_iter([True, True]).all() is True
        assert into_iter([True, False]).all() is False
        assert into_iter([]).all() is True

    def test_any(self):
        """Test any over booleans."""
        assert into_iter([False, True]).any() is True
        assert into_iter([False, False]).any() is False
        assert into_iter([]).any() is False

    def test_all_drains_everything(self):
        """Test all keeps pulling after a false element."""
        pulls = []
        assert into_iter(counting([True, False, True], pulls)).all() is False
        assert pulls == [True, False, True]

    def test_any_drains_everything(self):
        """Test any keeps pulling after a true element."""
        pulls = []
        assert into_iter(counting([False, True, False], pulls)).any() is True
        assert pulls == [False, True, False]

    def test_all_any_with_predicate(self):
        """Test all/any with a predicate."""
        assert iter_range(10).all(lambda x: x < 100) is True
        assert iter_range(10).any(lambda x: x > 100) is False

    def test_sum(self):
        """Test sum operation."""
        assert iter_range(100).sum() == sum(range(100))
        assert into_iter([]).sum() == 0

    def test_min_max_are_seeded_with_zero(self):
        """Test min/max include zero as a candidate."""
        assert into_iter([5, 7, 9]).min() == 0
        assert into_iter([5, 7, 9]).max() == 9
        assert into_iter([-3, -1]).max() == 0
        assert into_iter([-3, 4]).min() == -3

    def test_join(self):
        """Test string join."""
        assert into_iter([1, 2, 3]).join(", ") == "1, 2, 3"
        assert into_iter(["a"]).join("-") == "a"
        assert into_iter([]).join("-") == ""

    def test_count(self):
        """Test count operation."""
        assert iter_range(1000).count() == 1000
        assert iter_range(100).filter(lambda x: x % 5 == 0).count() == 80

    def test_for_each(self):
        """Test for_each visits every element."""
        seen = []
        into_iter([1, 2, 3]).for_each(seen.append)
        assert seen == [1, 2, 3]

    def test_fold(self):
        """Test left fold."""
        result = into_iter([1, 2, 3]).fold("", lambda acc, x: acc + str(x))
        assert result == "123"

    def test_reduce(self):
        """Test reduce seeded with the first element."""
        assert iter_range(1, 6).reduce(lambda a, b: a * b) == Some(120)

    def test_reduce_empty(self):
        """Test reduce over an empty iterator."""
        assert into_iter([]).reduce(lambda a, b: a + b) is Nothing

    def test_reduce_single_element(self):
        """Test reduce does not call the function for one element."""

        def explode(a, b):
            raise AssertionError("should not be called")

        assert into_iter([4]).reduce(explode) == Some(4)

    def test_find(self):
        """Test find passes the element index."""
        assert into_iter(["a", "b", "c"]).find(lambda x, i: i == 1) == Some("b")
        assert into_iter(["a", "b"]).find(lambda x, i: x == "z") is Nothing

    def test_find_map(self):
        """Test find_map returns the first Some."""
        result = into_iter([1, 2, 3]).find_map(
            lambda x, i: Some(x * i) if x > 1 else Nothing
        )
        assert result == Some(2)
        assert into_iter([1]).find_map(lambda x, i: Nothing) is Nothing

    def test_find_stops_pulling(self):
        """Test find leaves the rest of the iterator untouched."""
        it = into_iter([1, 2, 3, 4])
        assert it.find(lambda x, i: x == 2) == Some(2)
        assert it.collect() == [3, 4]

    def test_collect_with_factory(self):
        """Test collect into another container."""
        assert into_iter([1, 1, 2]).collect(set) == {1, 2}
        assert into_iter([1, 2]).collect(tuple) == (1, 2)


class TestForcedShutdown:
    """Tests for force_return / force_throw propagation."""

    def test_force_return_releases_source_once(self):
        """Test force_return closes the source once and exhausts every stage."""
        log = []
        source = into_iter(tracked([1, 2, 3, 4], log))
        mapped = source.map(lambda x: x * 10)
        filtered = mapped.filter(lambda x: x == 20)

        assert filtered.next() == PullResult.produced(10)
        assert filtered.force_return() == PullResult.exhausted()
        assert log == ["closed"]

        filtered.force_return()
        assert log == ["closed"]
        assert filtered.next().done
        assert mapped.next().done
        assert source.next().done

    def test_force_return_carries_value(self):
        """Test the final value travels back down the chain."""
        it = into_iter([1, 2, 3]).map(str).enumerate()
        assert it.force_return("bye") == PullResult.exhausted("bye")

    def test_force_return_without_close(self):
        """Test a list iterator stops after force_return even without close()."""
        it = into_iter([1, 2, 3])
        it.next()
        assert it.force_return() == PullResult.exhausted()
        assert it.next().done

    def test_take_caps_forced_value(self):
        """Test a spent take turns a late upstream value into exhaustion."""
        it = into_iter(Stubborn()).take(1)
        it.next()
        assert it.force_return() == PullResult.exhausted("late")

    def test_take_passes_forced_value(self):
        """Test take with budget left passes a late value through."""
        it = into_iter(Stubborn()).take(5)
        it.next()
        assert it.force_return() == PullResult.produced("late")

    def test_enumerate_counts_forced_value(self):
        """Test enumerate indexes a value produced during shutdown."""
        it = into_iter(Stubborn()).enumerate()
        assert it.next() == PullResult.produced((0, 1))
        assert it.force_throw(RuntimeError()) == PullResult.produced((1, "late"))

    def test_map_transforms_forced_value(self):
        """Test map applies its function during shutdown."""
        it = into_iter(Stubborn()).map(lambda x: f"<{x}>")
        assert it.force_return() == PullResult.produced("<late>")

    def test_filter_passes_forced_value_through(self):
        """Test filter does not apply its predicate during shutdown."""
        it = into_iter(Stubborn()).filter(lambda x: True)
        assert it.force_return() == PullResult.produced("late")

    def test_filter_map_drops_forced_value(self):
        """Test filter_map turns a Nothing during shutdown into exhaustion."""
        it = into_iter(Stubborn()).filter_map(lambda x: Nothing)
        assert it.force_return("bye") == PullResult.exhausted("bye")

    def test_zip_fans_out(self):
        """Test zip forces every member."""
        log = []
        z = into_iter(tracked([1, 2], log, "a")).zip(tracked([3, 4], log, "b"))
        z.next()
        assert z.force_return() == PullResult.exhausted()
        assert log == ["a", "b"]

    def test_zip_forces_all_members_when_one_raises(self):
        """Test zip keeps forcing members after one of them raises."""
        log = []
        z = zip_iters(tracked([1, 2], log, "a"), tracked([3, 4], log, "b"))
        z.next()
        with pytest.raises(ValueError):
            z.force_throw(ValueError("boom"))
        assert log == ["a", "b"]

    def test_error_in_for_each_releases_source(self):
        """Test an exception from for_each closes the source."""
        log = []

        def fail_on_two(x):
            if x == 2:
                raise RuntimeError("bad element")

        with pytest.raises(RuntimeError):
            into_iter(tracked([1, 2, 3], log)).map(lambda x: x).for_each(fail_on_two)
        assert log == ["closed"]

    def test_error_in_map_propagates(self):
        """Test errors from stage functions are not caught."""

        def fail(x):
            raise KeyError(x)

        it = into_iter([1]).map(fail)
        with pytest.raises(KeyError):
            it.next()

    def test_context_manager_releases(self):
        """Test leaving a with-block closes the source."""
        log = []
        with into_iter(tracked([1, 2, 3], log)).take(3) as it:
            assert next(it) == 1
        assert log == ["closed"]
        assert it.next().done

    def test_close_alias(self):
        """Test close() is force_return()."""
        log = []
        it = into_iter(tracked([1, 2], log))
        it.next()
        it.close()
        assert log == ["closed"]

    def test_spent_take_releases_source(self):
        """Test leaving a with-block closes a source a drained take left open."""
        log = []
        with into_iter(tracked([1, 2, 3, 4], log)).take(2) as chain:
            assert list(chain) == [1, 2]
            assert log == []
        assert log == ["closed"]

    def test_spent_take_reports_plain_exhaustion(self):
        """Test a finished take ignores a value produced during shutdown."""
        it = into_iter(Stubborn()).take(1)
        assert it.collect() == [1]
        assert it.force_return("bye") == PullResult.exhausted("bye")

    def test_drained_zip_releases_every_member(self):
        """Test force_return after a zip ended still closes the longer member."""
        log = []
        z = zip_iters(tracked([1, 2, 3], log, "a"), tracked([1, 2, 3, 4, 5], log, "b"))
        assert len(list(z)) == 3
        assert log == ["a"]
        assert z.force_return() == PullResult.exhausted()
        assert log == ["a", "b"]

    def test_second_force_return_does_not_release_again(self):
        """Test repeated forced shutdown after a drained take closes once."""
        log = []
        chain = into_iter(tracked([1, 2, 3], log)).take(1).map(lambda x: x)
        assert chain.collect() == [1]
        chain.force_return()
        chain.force_return()
        chain.close()
        assert log == ["closed"]

    def test_force_throw_on_drained_source(self):
        """Test force_throw on a finished generator does not raise."""
        it = into_iter(x for x in [1])
        assert it.collect() == [1]
        assert it.force_throw(ValueError()) == PullResult.exhausted()

    def test_release_error_keeps_original_failure(self, caplog):
        """Test an error raised while releasing does not hide the original one."""

        def noisy():
            try:
                yield 1
                yield 2
            finally:
                raise OSError("cleanup failed")

        def fail(x):
            raise RuntimeError("bad element")

        with caplog.at_level(logging.WARNING, logger="lazyiter.core"):
            with pytest.raises(RuntimeError, match="bad element"):
                into_iter(noisy()).for_each(fail)
        assert "Error while releasing" in caplog.text


class TestPythonIteration:
    """Tests for the Python iterator protocol on Iter."""

    def test_for_loop(self):
        """Test iterating with a for loop."""
        assert [x for x in iter_range(3)] == [0, 1, 2]

    def test_stop_iteration_value(self):
        """Test the generator return value becomes the final value."""

        def gen():
            yield 1
            return "done"

        it = into_iter(gen())
        assert it.next() == PullResult.produced(1)
        assert it.next() == PullResult.exhausted("done")

    def test_exhaustion_latches(self):
        """Test an exhausted iterator never resurrects."""

        class Flaky:
            def __init__(self):
                self.calls = 0

            def __iter__(self):
                return self

            def __next__(self):
                self.calls += 1
                if self.calls == 1:
                    raise StopIteration
                return self.calls

        it = into_iter(Flaky())
        assert it.next().done
        assert it.next().done
        assert list(it) == []

    def test_iter_of(self):
        """Test the Iter.of constructor."""
        assert Iter.of((1, 2)).collect() == [1, 2]
        it = iter_range(2)
        assert Iter.of(it) is it
