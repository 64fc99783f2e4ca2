"""Page extraction plugin."""

manifest = {
    "title": "PDF Page Extract",
    "summary": "Pull selected pages out of a PDF, or convert them to JPG/PNG images, entirely offline.",
    "blueprint": "page_extract",
    "category": "Document Utilities",
}


__all__ = ["manifest"]
