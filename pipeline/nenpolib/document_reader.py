# Standard Library
import glob
import os

from nenpolib.models import DocumentContent


#============================================
def read_documents(patterns: list[str]) -> list[DocumentContent]:
	"""
	Expand glob patterns and read every matching file as UTF-8 text.
	"""
	documents = []
	seen = set()
	for pattern in patterns:
		for path in sorted(glob.glob(os.path.expanduser(pattern), recursive=True)):
			if os.path.isdir(path):
				continue
			if path in seen:
				continue
			seen.add(path)
			try:
				with open(path, "r", encoding="utf-8") as handle:
					content = handle.read()
			except (OSError, UnicodeDecodeError) as error:
				raise RuntimeError(f"Cannot read local document {path}: {error}") from error
			documents.append(DocumentContent(file_path=path, content=content))
	return documents
