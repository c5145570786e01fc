"""Root test configuration: shared documents and logging isolation"""

import logging

import pytest
import structlog


SCENARIO_TEXT = '---\ntitle: "Hi"\ntags: ["a", "b"]\n---\n\nHello **world**\n'

POST_TEXT = """\
---
title: "A Post"
status: "draft"
tags: ["python", "markdown"]
featured: false
---

# Introduction

Some **bold** text and a [link](https://example.com).

![diagram](./images/diagram.png)
"""


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog/stdlib handler configuration a CLI invocation installed."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture(name="scenario_text")
def scenario_text_fixture():
    return SCENARIO_TEXT


@pytest.fixture(name="post_text")
def post_text_fixture():
    return POST_TEXT
