"""
CiteCheck - citation verification for LLM answers.

Checks that the references an answer lists are backed by identifiers
(PMID, DOI, NCT ID) found in the evidence the model was grounded on:
- Citation marker extraction (^[N]^ and [N])
- References section parsing
- Evidence identifier indexing
- Hallucinated reference classification
- Sentence-level PMID citation precision
"""

__version__ = "1.0.0"
