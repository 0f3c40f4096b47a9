"""HTTP surface for the Business Card OCR API."""
