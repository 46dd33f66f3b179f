# Services used by the migration script:
#
#   services.gcs        — Google Cloud Storage source (listing + download)
#   services.storage    — Cloudflare R2 destination (listing + upload)
#   services.lister     — paginated source scan
#   services.classifier — folder discovery / marker date filter
#   services.differ     — what still needs copying per folder
#   services.transfer   — bounded-concurrency download → upload pool
#   services.migration  — orchestrates a full run
