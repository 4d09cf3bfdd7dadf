from __future__ import annotations

from pathlib import Path
from typing import Dict


README = """# Prompt guidance

Curated instructions for the coding assistant.

```
prompts/
├── README.md
├── INDEX.md
├── fastapi/
│   ├── routing.md        # routers and endpoints
│   └── dependencies.md
├── python/
│   └── style.md
└── security/
    └── secrets.md
```
"""

INDEX = """# Index

## Building API endpoints
Keywords: #fastapi #api
When to use: adding or changing HTTP routes.

1. [Routing](fastapi/routing.md)
2. [Dependencies](fastapi/dependencies.md)

## Handling secrets
Keywords: #security #secrets
When to use: reading credentials or tokens.

- [Secrets](security/secrets.md)

## Code style
Keywords: #python #style

- [Style](python/style.md)
"""

ROUTING = """---
tags: [fastapi]
---
# FastAPI routing

Guidance for structuring routers
and endpoints.

Tags: #api #routing

```python
# [not a link](nowhere.md)
@app.get("/")
async def root(): ...
```

@fastapi Rule - Async endpoints: Use async def for I/O bound handlers.

## See Also
- [Dependencies](dependencies.md)
- [Secrets](../security/secrets.md#environment)
"""

DEPENDENCIES = """# Dependency injection

Use Depends for shared resources.

Keywords: #fastapi #dependencies

See [the tutorial](https://fastapi.tiangolo.com/tutorial/dependencies/).

## See Also
- [Routing](routing.md)
"""

STYLE = """# Python style

Keywords: #python #style

- `@python Rule - Naming: Use snake_case for functions.`

## See also
- [Routing](../fastapi/routing.md)
"""

SECRETS = """# Secrets handling

Never hardcode credentials.

Tags: #security #secrets

## See Also
- [Style](../python/style.md)
"""

CORPUS: Dict[str, str] = {
    "README.md": README,
    "INDEX.md": INDEX,
    "fastapi/routing.md": ROUTING,
    "fastapi/dependencies.md": DEPENDENCIES,
    "python/style.md": STYLE,
    "security/secrets.md": SECRETS,
}


def write_corpus(root: Path, files: Dict[str, str] = CORPUS) -> Path:
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


