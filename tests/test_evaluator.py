"""Deterministic evaluator tests using a fixed sequence of die values."""

from unittest.mock import patch

import pytest

from dicebox.config import settings
from dicebox.dice import roll
from dicebox.dice.errors import DivisionByZeroError, LimitExceededError, UnknownVariableError
from dicebox.dice.evaluator import divide, evaluate
from dicebox.dice.lexer import tokenize
from dicebox.dice.parser import parse


class TestArithmetic:
    def test_number(self, make_rng) -> None:
        result = roll("5", rng=make_rng([]))
        assert result.total == 5
        assert result.rolls == []
        assert result.details == "5 = **5**"

    def test_grouping(self, make_rng) -> None:
        result = roll("(2+3)*2", rng=make_rng([]))
        assert result.total == 10
        assert result.details == "(2 + 3) * 2 = **10**"

    def test_dice_plus_modifier(self, make_rng) -> None:
        result = roll("2d6+3", rng=make_rng([3, 4]))
        assert result.total == 10
        assert result.rolls[0].results == [3, 4]
        assert result.details == "(2d6 [3, 4] = 7) + 3 = **10**"

    def test_unary_minus_on_dice(self, make_rng) -> None:
        result = roll("-d6", rng=make_rng([4]))
        assert result.total == -4
        assert result.details == "-d6 [4] = **-4**"

    @pytest.mark.parametrize(
        ("expr", "expected"),
        [("7/2", 4), ("-7/2", -4), ("5/3", 2), ("10/4", 3), ("9/3", 3), ("1/3", 0), ("-1/2", -1)],
    )
    def test_division_rounds_half_away_from_zero(self, make_rng, expr: str, expected: int) -> None:
        assert roll(expr, rng=make_rng([])).total == expected

    def test_division_by_zero(self, make_rng) -> None:
        with pytest.raises(DivisionByZeroError, match="Division by zero"):
            roll("1/(2-2)", rng=make_rng([]))

    def test_divide_with_float(self) -> None:
        assert divide(7.5, 2) == 4
        assert divide(-3, 2.0) == -2

    def test_long_flat_chain_is_rejected(self, make_rng) -> None:
        with pytest.raises(LimitExceededError, match="too long"):
            roll("+".join(["1"] * 3000), rng=make_rng([]))

    def test_chain_at_token_cap_evaluates(self, make_rng) -> None:
        expr = "+".join(["1"] * 100)  # 199 tokens
        assert roll(expr, rng=make_rng([])).total == 100


class TestDiceTerms:
    def test_single_die_top_level(self, make_rng) -> None:
        result = roll("d20", rng=make_rng([14]))
        assert result.total == 14
        assert result.details == "d20 [14] = **14**"
        assert result.critical is None

    def test_keep_highest(self, make_rng) -> None:
        result = roll("4d6kh3", rng=make_rng([4, 1, 6, 3]))
        group = result.rolls[0]
        assert group.results == [4, 1, 6, 3]
        assert group.kept == [4, 6, 3]
        assert group.subtotal == 13
        assert group.modifier == "kh3"
        assert result.total == 13
        assert result.details == "4d6kh3 [4, ~~1~~, 6, 3] = **13**"

    def test_keep_highest_tie_keeps_first_rolled(self, make_rng) -> None:
        result = roll("4d6kh2", rng=make_rng([5, 3, 5, 5]))
        assert result.rolls[0].kept == [5, 5]
        assert result.details == "4d6kh2 [5, ~~3~~, 5, ~~5~~] = **10**"

    def test_keep_lowest_tie_keeps_first_rolled(self, make_rng) -> None:
        result = roll("3d6kl1", rng=make_rng([4, 2, 2]))
        assert result.total == 2
        assert result.details == "3d6kl1 [~~4~~, 2, ~~2~~] = **2**"

    def test_drop_lowest_tie_drops_last_rolled(self, make_rng) -> None:
        result = roll("4d6dl1", rng=make_rng([3, 1, 1, 6]))
        assert result.rolls[0].kept == [3, 1, 6]
        assert result.details == "4d6dl1 [3, 1, ~~1~~, 6] = **10**"

    def test_drop_highest_tie_drops_last_rolled(self, make_rng) -> None:
        result = roll("4d6dh1", rng=make_rng([6, 2, 6, 3]))
        assert result.rolls[0].kept == [6, 2, 3]
        assert result.total == 11

    def test_keep_more_than_rolled(self, make_rng) -> None:
        result = roll("2d6kh5", rng=make_rng([3, 4]))
        assert result.rolls[0].kept == [3, 4]
        assert result.total == 7

    def test_exploding_chain(self, make_rng) -> None:
        rng = make_rng([6, 2, 6, 6, 1, 3])
        result = roll("3d6!", rng=rng)
        assert result.rolls[0].results == [6, 2, 6, 6, 1, 3]
        assert result.total == 24
        assert result.details == "3d6! [6!, 2, 6!, 6!, 1, 3] = **24**"
        assert rng.remaining == 0

    def test_exploding_then_keep(self, make_rng) -> None:
        result = roll("2d6!kh1", rng=make_rng([6, 2, 4]))
        group = result.rolls[0]
        assert group.results == [6, 2, 4]
        assert group.kept == [6]
        assert result.total == 6

    def test_explosion_cap(self, make_rng) -> None:
        rng = make_rng([6, 6, 6])
        with patch.object(settings, "max_explosions", 2):
            result = roll("d6!", rng=rng)
        assert result.rolls[0].results == [6, 6, 6]
        assert result.total == 18
        assert rng.remaining == 0

    def test_one_sided_explosion_terminates(self, make_rng) -> None:
        result = roll("d1!", rng=make_rng([1] * 101))
        assert len(result.rolls[0].results) == 101
        assert result.total == 101

    def test_reroll_repeats(self, make_rng) -> None:
        rng = make_rng([1, 1, 7])
        result = roll("d20r1", rng=rng)
        assert result.rolls[0].results == [7]
        assert len(rng.calls) == 3

    def test_reroll_once(self, make_rng) -> None:
        result = roll("d20ro1", rng=make_rng([1, 1]))
        assert result.rolls[0].results == [1]

    def test_reroll_threshold(self, make_rng) -> None:
        result = roll("d6r2", rng=make_rng([2, 1, 5]))
        assert result.total == 5

    def test_reroll_with_less_than_threshold(self, make_rng) -> None:
        result = roll("d20ro<3", rng=make_rng([2, 15]))
        group = result.rolls[0]
        assert group.results == [15]
        assert group.modifier == "ro3"
        assert result.total == 15

    def test_reroll_then_success_count(self, make_rng) -> None:
        result = roll("3d6r1<3", rng=make_rng([1, 2, 4, 5]))
        assert result.rolls[0].results == [2, 4, 5]
        assert result.total == 1

    def test_reroll_cap(self, make_rng) -> None:
        with patch.object(settings, "max_rerolls", 2):
            result = roll("d6r1", rng=make_rng([1, 1, 1]))
        assert result.total == 1

    def test_draw_order_is_left_to_right(self, make_rng) -> None:
        rng = make_rng([1, 2, 3])
        roll("d4+d6*d8", rng=rng)
        assert rng.calls == [(1, 4), (1, 6), (1, 8)]


class TestSuccessCounting:
    def test_counts_qualifying_results(self, make_rng) -> None:
        result = roll("10d6>=5", rng=make_rng([1, 2, 3, 4, 5, 6, 5, 4, 3, 6]))
        group = result.rolls[0]
        assert result.total == 4
        assert group.subtotal == 4
        assert group.modifier == ">=5"
        assert result.details == "10d6>=5 [1, 2, 3, 4, **5**, **6**, **5**, 4, 3, **6**] = **4**"

    def test_counts_only_kept(self, make_rng) -> None:
        result = roll("4d6kh2>=4", rng=make_rng([6, 3, 4, 1]))
        assert result.rolls[0].kept == [6, 4]
        assert result.total == 2

    def test_in_compound_expression(self, make_rng) -> None:
        result = roll("2d6>4+1", rng=make_rng([5, 2]))
        assert result.total == 2
        assert result.details == "(2d6>4 [**5**, 2] = 1) + 1 = **2**"

    def test_equality(self, make_rng) -> None:
        assert roll("3d6==1", rng=make_rng([1, 1, 2])).total == 2


class TestVariables:
    def test_substitution_trace(self, make_rng) -> None:
        result = roll("d20+@strength", {"strength": 5}, rng=make_rng([12]))
        assert result.total == 17
        assert result.details == "d20 [12] + @strength=5 = **17**"

    def test_unknown_variable(self, make_rng) -> None:
        with pytest.raises(UnknownVariableError, match="Unknown variable: @dex") as exc_info:
            roll("d20+@dex", {"strength": 5}, rng=make_rng([12]))
        assert exc_info.value.name == "dex"

    def test_missing_mapping_is_unknown(self, make_rng) -> None:
        with pytest.raises(UnknownVariableError):
            roll("@strength", rng=make_rng([]))

    def test_lowercase_fallback(self, make_rng) -> None:
        assert roll("@STR+1", {"str": 3}, rng=make_rng([])).total == 4

    def test_float_value(self, make_rng) -> None:
        result = roll("@bonus*2", {"bonus": 1.5}, rng=make_rng([]))
        assert result.total == 3.0
        assert result.details == "@bonus=1.5 * 2 = **3**"


class TestCritical:
    @pytest.mark.parametrize(
        ("expr", "value", "expected"),
        [
            ("d20", 20, "success"),
            ("d20", 1, "failure"),
            ("d20", 10, None),
            ("1d20", 20, "success"),
            ("(d20)", 1, "failure"),
            ("d20+5", 20, None),
            ("d20ro1", 20, None),
        ],
    )
    def test_single_d20_only(self, make_rng, expr: str, value: int, expected: str | None) -> None:
        assert roll(expr, rng=make_rng([value])).critical == expected

    def test_multiple_d20(self, make_rng) -> None:
        assert roll("2d20kh1", rng=make_rng([20, 5])).critical is None


class TestEvaluate:
    def test_tree_is_reusable(self, make_rng) -> None:
        node = parse(tokenize("d6+1"))
        first = evaluate(node, rng=make_rng([1]), expression="d6+1")
        second = evaluate(node, rng=make_rng([2]), expression="d6+1")
        assert (first.total, second.total) == (2, 3)
        assert first.rolls is not second.rolls
        assert first.expression == "d6+1"

    def test_default_random_source(self) -> None:
        node = parse(tokenize("d20"))
        with patch("dicebox.dice.evaluator.random.randint", return_value=20):
            result = evaluate(node)
        assert result.critical == "success"
