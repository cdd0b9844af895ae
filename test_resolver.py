import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from trello_semantic.core.access import AccessScopeGuard
from trello_semantic.core.cache import ResolutionCache
from trello_semantic.core.context import MatchPolicy, ResolverContext
from trello_semantic.core.errors import (
    AccessDenied,
    AmbiguousName,
    NoConfidentMatch,
    NotFoundEmpty,
    UpstreamError,
)
from trello_semantic.core.resolver import resolve_board_id, resolve_card_id, resolve_list_id
from trello_semantic.services.trello import TrelloCredentials


def _make_context(**overrides):
    params = {"credentials": TrelloCredentials(api_key="k", api_token="t"), "cache": ResolutionCache()}
    params.update(overrides)
    return ResolverContext(**params)


def _items(*names):
    return [{"id": f"id-{i}", "name": name} for i, name in enumerate(names)]


class TestResolveBoard(unittest.TestCase):
    def test_exact_match_beats_close_neighbour(self):
        async def run():
            boards = AsyncMock(return_value=_items("Marketing", "Markting"))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                result = await resolve_board_id(_make_context(), "  marketing ")

            self.assertEqual(result.id, "id-0")
            self.assertTrue(result.exact_match)
            self.assertEqual(result.name, "Marketing")

        asyncio.run(run())

    def test_one_typo_is_accepted_as_fuzzy(self):
        async def run():
            boards = AsyncMock(return_value=_items("Marketing"))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                result = await resolve_board_id(_make_context(), "Markting")

            self.assertEqual(result.id, "id-0")
            self.assertFalse(result.exact_match)

        asyncio.run(run())

    def test_near_tie_is_ambiguous(self):
        async def run():
            boards = AsyncMock(return_value=_items("Project Alpha", "Project Alphb", "Ops"))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                with self.assertRaises(AmbiguousName) as ctx:
                    await resolve_board_id(_make_context(), "Project Alph")

            self.assertEqual(ctx.exception.candidates, ["Project Alpha", "Project Alphb", "Ops"])
            self.assertIn("Multiple similar matches", ctx.exception.message)

        asyncio.run(run())

    def test_ambiguous_candidates_are_capped_at_ten(self):
        async def run():
            names = [f"zz{i:02d}" for i in range(15)]
            boards = AsyncMock(return_value=_items(*names))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                with self.assertRaises(AmbiguousName) as ctx:
                    await resolve_board_id(_make_context(), "Quarterly")

            self.assertEqual(ctx.exception.candidates, names[:10])

        asyncio.run(run())

    def test_low_score_is_not_a_confident_match(self):
        async def run():
            boards = AsyncMock(return_value=_items("Zzzzzzzzzzzz", "Roadmap"))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                with self.assertRaises(NoConfidentMatch) as ctx:
                    await resolve_board_id(_make_context(), "Roadmop2")

            # best candidates first
            self.assertEqual(ctx.exception.candidates, ["Roadmap", "Zzzzzzzzzzzz"])
            self.assertIn("Did you mean", ctx.exception.message)

        asyncio.run(run())

    def test_configurable_threshold(self):
        async def run():
            boards = AsyncMock(return_value=_items("Zzzzzzzzzzzz", "Roadmap"))
            context = _make_context(policy=MatchPolicy(match_threshold=0.7))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                result = await resolve_board_id(context, "Roadmop2")
            self.assertEqual(result.name, "Roadmap")
            self.assertFalse(result.exact_match)

        asyncio.run(run())

    def test_access_denied_short_circuits_network(self):
        async def run():
            boards = AsyncMock(return_value=_items("Payroll"))
            context = _make_context(guard=AccessScopeGuard(["Marketing"]))
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                with self.assertRaises(AccessDenied):
                    await resolve_board_id(context, "Payroll")
            boards.assert_not_awaited()

        asyncio.run(run())

    def test_empty_listing(self):
        async def run():
            with patch("trello_semantic.core.resolver.fetch_boards", AsyncMock(return_value=[])):
                with self.assertRaises(NotFoundEmpty):
                    await resolve_board_id(_make_context(), "Marketing")

        asyncio.run(run())

    def test_upstream_error_propagates(self):
        async def run():
            failing = AsyncMock(side_effect=UpstreamError("Failed to fetch boards: Unauthorized", 401, "Unauthorized"))
            with patch("trello_semantic.core.resolver.fetch_boards", failing):
                with self.assertRaises(UpstreamError) as ctx:
                    await resolve_board_id(_make_context(), "Marketing")
            self.assertEqual(ctx.exception.status_text, "Unauthorized")
            self.assertEqual(ctx.exception.to_result()["status"], 401)

        asyncio.run(run())

    def test_fuzzy_resolution_is_cached(self):
        async def run():
            boards = AsyncMock(return_value=_items("Marketing"))
            context = _make_context()
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                first = await resolve_board_id(context, "Markting")
                second = await resolve_board_id(context, "MARKTING")

            self.assertFalse(first.exact_match)
            self.assertTrue(second.exact_match)
            self.assertEqual(second.id, "id-0")
            self.assertEqual(second.name, "Marketing")
            self.assertEqual(boards.await_count, 1)

        asyncio.run(run())

    def test_works_without_cache(self):
        async def run():
            boards = AsyncMock(return_value=_items("Marketing"))
            context = _make_context(cache=None)
            with patch("trello_semantic.core.resolver.fetch_boards", boards):
                await resolve_board_id(context, "Marketing")
                await resolve_board_id(context, "Marketing")
            self.assertEqual(boards.await_count, 2)

        asyncio.run(run())


class TestResolveList(unittest.TestCase):
    def test_exact_match_wins_over_ambiguous_neighbours(self):
        async def run():
            lists = AsyncMock(return_value=_items("Dev", "Devs"))
            with patch("trello_semantic.core.resolver.fetch_lists", lists):
                result = await resolve_list_id(_make_context(), "board-1", "Dev")

            self.assertEqual(result.id, "id-0")
            self.assertTrue(result.exact_match)
            self.assertEqual(lists.await_args.args[1], "board-1")

        asyncio.run(run())

    def test_fuzzy_list_match(self):
        async def run():
            lists = AsyncMock(return_value=_items("To Do", "Done"))
            with patch("trello_semantic.core.resolver.fetch_lists", lists):
                result = await resolve_list_id(_make_context(), "board-1", "To Doo")

            self.assertEqual(result.name, "To Do")
            self.assertFalse(result.exact_match)

        asyncio.run(run())

    def test_list_cache_is_scoped_per_board(self):
        async def run():
            lists = AsyncMock(
                side_effect=[
                    [{"id": "l-1", "name": "To Do"}],
                    [{"id": "l-2", "name": "To Do"}],
                ]
            )
            context = _make_context()
            with patch("trello_semantic.core.resolver.fetch_lists", lists):
                first = await resolve_list_id(context, "board-1", "To Do")
                second = await resolve_list_id(context, "board-2", "To Do")
                again = await resolve_list_id(context, "board-1", "to do")

            self.assertEqual(first.id, "l-1")
            self.assertEqual(second.id, "l-2")
            self.assertEqual(again.id, "l-1")
            self.assertEqual(again.name, "To Do")
            self.assertEqual(lists.await_count, 2)

        asyncio.run(run())

    def test_no_lists(self):
        async def run():
            with patch("trello_semantic.core.resolver.fetch_lists", AsyncMock(return_value=[])):
                with self.assertRaises(NotFoundEmpty):
                    await resolve_list_id(_make_context(), "board-1", "To Do")

        asyncio.run(run())


class TestResolveCard(unittest.TestCase):
    def test_search_prefers_exact_name(self):
        async def run():
            hits = [
                {"id": "c-1", "name": "Fix login bug on mobile"},
                {"id": "c-2", "name": "Fix login bug"},
            ]
            search = AsyncMock(return_value=hits)
            listing = AsyncMock()
            with patch("trello_semantic.core.resolver.search_cards", search), patch(
                "trello_semantic.core.resolver.fetch_open_cards", listing
            ):
                result = await resolve_card_id(_make_context(), "board-1", "fix login bug")

            self.assertEqual(result.id, "c-2")
            self.assertTrue(result.exact_match)
            listing.assert_not_awaited()

            kwargs = search.await_args.kwargs
            self.assertEqual(kwargs.get("board_ids"), ["board-1"])
            self.assertEqual(search.await_args.args[1], 'name:"fix login bug"')

        asyncio.run(run())

    def test_search_without_exact_takes_first_hit(self):
        async def run():
            hits = [
                {"id": "c-1", "name": "Fix login bug on mobile"},
                {"id": "c-2", "name": "Fix login bug on desktop"},
            ]
            with patch("trello_semantic.core.resolver.search_cards", AsyncMock(return_value=hits)):
                result = await resolve_card_id(_make_context(), "board-1", "login bug")

            self.assertEqual(result.id, "c-1")
            self.assertFalse(result.exact_match)

        asyncio.run(run())

    def test_fallback_listing_exact(self):
        async def run():
            listing = AsyncMock(return_value=_items("Write release notes", "Ship it"))
            with patch("trello_semantic.core.resolver.search_cards", AsyncMock(return_value=[])), patch(
                "trello_semantic.core.resolver.fetch_open_cards", listing
            ):
                result = await resolve_card_id(_make_context(), "board-1", "ship it")

            self.assertEqual(result.id, "id-1")
            self.assertTrue(result.exact_match)
            listing.assert_awaited_once()

        asyncio.run(run())

    def test_fallback_uses_stricter_threshold(self):
        async def run():
            listing = AsyncMock(return_value=_items("Write release notes"))
            with patch("trello_semantic.core.resolver.search_cards", AsyncMock(return_value=[])), patch(
                "trello_semantic.core.resolver.fetch_open_cards", listing
            ):
                close = await resolve_card_id(_make_context(), "board-1", "Write release note")
                self.assertFalse(close.exact_match)
                self.assertEqual(close.id, "id-0")

                # two edits in 19 characters scores ~0.89: fine for a list, not for a card
                with self.assertRaises(NoConfidentMatch):
                    await resolve_card_id(_make_context(), "board-1", "Write relase nots")

        asyncio.run(run())

    def test_fallback_with_no_open_cards(self):
        async def run():
            with patch("trello_semantic.core.resolver.search_cards", AsyncMock(return_value=[])), patch(
                "trello_semantic.core.resolver.fetch_open_cards", AsyncMock(return_value=[])
            ):
                with self.assertRaises(NotFoundEmpty):
                    await resolve_card_id(_make_context(), "board-1", "Ghost card")

        asyncio.run(run())

    def test_cards_are_not_cached(self):
        async def run():
            search = AsyncMock(return_value=[{"id": "c-1", "name": "Ship it"}])
            context = _make_context()
            with patch("trello_semantic.core.resolver.search_cards", search):
                await resolve_card_id(context, "board-1", "Ship it")
                await resolve_card_id(context, "board-1", "Ship it")

            self.assertEqual(search.await_count, 2)
            self.assertEqual(context.cache.stats()["scoped_entries"], 0)

        asyncio.run(run())


if __name__ == "__main__":
    unittest.main()
