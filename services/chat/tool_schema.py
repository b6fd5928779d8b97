"""Schema definition for the web search tool offered while asking questions."""

from typing import Any, Dict

FUNCTION_NAME = "search_web"

FUNCTION_DEFINITION: Dict[str, Any] = {
	"type": "function",
	"function": {
		"name": FUNCTION_NAME,
		"description": (
			"Search the web for information related to the user's query, "
			"or analyze a website when the query contains a URL or a site: filter."
		),
		"parameters": {
			"type": "object",
			"properties": {
				"query": {
					"type": "string",
					"description": "The search query, a URL, or site:domain.com to analyze a specific website.",
				},
			},
			"required": ["query"],
			"additionalProperties": False,
		},
	},
}
