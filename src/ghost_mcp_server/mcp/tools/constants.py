"""Shared constants for MCP tool handlers."""

# Fields returned by posts_browse: enough to list and pick posts without
# transferring content.
BROWSE_FIELDS = (
    "id,slug,title,url,status,visibility,featured,"
    "published_at,updated_at,excerpt,feature_image"
)
BROWSE_INCLUDE = "primary_author,primary_tag"

# Content formats returned by posts_read and the post:// resource.
READ_FORMATS = "lexical,html"

# Tool arguments that accept the file:// indirection marker.
CONTENT_ARGUMENTS = ("html", "lexical")

# Values accepted by the sync tools' format argument.
SYNC_FORMAT_CHOICES = ["lexical", "structured", "html", "markdown"]
