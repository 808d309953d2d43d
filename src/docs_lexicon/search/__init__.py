"""
In-memory lexical search package.

- analyzers: Tokenizer pipeline and stopword list
- index: Inverted index over document slots
- stats: BM25 scoring primitives
- scorer: Query scoring and ranking
- snippet: Excerpt extraction
- locking: Reader/writer lock
- persistence: Cache file format I/O
- engine: The IndexEngine composing all of the above
"""
