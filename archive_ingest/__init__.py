# Conversation Archive Ingest - Source Package
#
# Modules:
#   - config: Configuration constants
#   - settings: Environment settings and provider auth
#   - errors: Exception taxonomy
#   - logging: Structured logging setup
#   - utils: Shared utility functions
#   - session: Session-scoped clients passed to each phase
#   - database: Supabase operations (storage, imports, files, conversations, chunks, embeddings, audit)
#   - llm: Embedding clients
#   - processing: Reassembly, extraction, segmentation, embedding, pipeline
#   - cli: Command-line entry point
