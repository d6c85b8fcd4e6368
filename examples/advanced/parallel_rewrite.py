"""Rewrite 1000 docs in parallel: each thread runs its own matcher copy."""

from concurrent.futures import ThreadPoolExecutor

from pespunte import Heading, insert_after, rewrite

docs = ["# Doc " + str(i) + "\n\nContent for document " + str(i) + "\n" for i in range(1000)]
template = insert_after("<!-- toc -->\n", Heading(1).fuse())


def run(source: str) -> str:
    return rewrite(source, template.fresh())


with ThreadPoolExecutor(max_workers=8) as ex:
    results = list(ex.map(run, docs))

print(f"Rewrote {len(results)} documents in parallel")
print(results[0])
