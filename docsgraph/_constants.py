"""Common literal values used across docsgraph.

These constants keep artifact filenames and reserved identifiers centralized so
the generator, the render layer, and tests can import the same values without
drifting. Intended for internal use within the docsgraph package.

Examples
--------
>>> from docsgraph import _constants
>>> _constants.ROOT_SECTION_ID
'_root'
>>> _constants.DOCS_GRAPH_FILENAME.endswith('.json')
True
"""

ROOT_SECTION_ID = "_root"

DOCS_GRAPH_FILENAME = "docs-graph.json"
DOCS_RUNTIME_GRAPH_FILENAME = "docs-runtime-graph.json"
SEARCH_INDEX_FILENAME = "search-index.json"
SITE_PUBLIC_CONFIG_FILENAME = "site-public.json"
LLMS_FILENAME = "llms.txt"

MARKDOWN_SUFFIX = ".md"
