# docportal/llm/prompts/templates.py

DOCUMENT_ANALYST_SYSTEM_V1 = (
    "You are an expert document analyst with expertise in business, financial, HR and legal documents. "
    "You always answer with a single JSON object and nothing else."
)

ANALYZE_DOCUMENT_V1 = """
Analyze the following document content comprehensively.
Return STRICT JSON only (no markdown).

Rules:
- IMPORTANT: All JSON string values must be valid JSON. Escape quotes and newlines.
- Base every statement on the document content. Do not invent parties, dates or amounts.
- If the content is too short or unclear to analyze well, say so in the summary and lower "confidence".
- Dates in "timeline" use YYYY-MM-DD when the document gives a full date.

DOCUMENT TITLE: {{title}}
DOCUMENT TYPE: {{document_type}}

DOCUMENT CONTENT:
{{text}}

Return JSON with shape:
{
  "summary": "A concise 2-3 paragraph summary of the document's key points and overall purpose",
  "entities": [
    { "name": "entity name", "type": "person|organization|location|date", "mentions": ["short quote or section reference"] }
  ],
  "timeline": [
    { "date": "YYYY-MM-DD", "event": "what happens on this date" }
  ],
  "keyInsights": ["3-5 key insights from the document"],
  "categories": ["2-3 categories this document belongs to"],
  "confidence": 0.0-1.0
}
""".strip()
