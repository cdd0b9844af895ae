"""Name-resolution tuning constants for the Trello semantic layer.

These values drive fuzzy matching and caching in the resolver. They are
defaults only: the runtime copies them into a MatchPolicy which can be
overridden from the environment (see trello_semantic.config.settings).
"""

# Minimum similarity for a fuzzy board or list match to be accepted.
#
# One typo in a nine-letter name ("Markting" vs "Marketing") scores ~0.89,
# two typos in the same name score ~0.78 and are rejected.
MATCH_THRESHOLD = 0.8

# Minimum similarity for a fuzzy card match found through the open-card
# listing fallback. The listing is not filtered by the search index, so the
# bar is higher than for boards and lists.
FALLBACK_MATCH_THRESHOLD = 0.9

# If the two best fuzzy scores are closer than this, the name is treated as
# ambiguous and no match is returned.
AMBIGUITY_GAP = 0.05

# Number of candidate names surfaced in error messages.
MAX_AMBIGUOUS_CANDIDATES = 10
MAX_SUGGESTED_CANDIDATES = 5

# Search API result caps.
CARD_RESOLVE_SEARCH_LIMIT = 10
CARD_SEARCH_LIMIT = 50

# Board/list id cache lifetime.
DEFAULT_CACHE_TTL_MINUTES = 5

# Default and maximum number of boards returned by the board listing tool.
BOARD_LIST_LIMIT = 50
MAX_BOARD_LIST_LIMIT = 100
