"""HTML fragment templates and the substitution function that fills them.

Templates are plain strings with ``{{KEY}}`` placeholders. Keys follow a
``KIND:name`` convention: ``TAG:`` for heading tag names, ``ID:`` for
element ids, ``CONTENT:`` for nested HTML.
"""

from __future__ import annotations

from typing import Mapping


def render_template(template: str, replacements: Mapping[str, str]) -> str:
    """Replace every ``{{KEY}}`` in ``template`` with ``replacements[KEY]``.

    Placeholders without a replacement are left as they are.

    >>> render_template("<{{TAG}}>{{X}}</{{TAG}}>", {"TAG": "h1", "X": "hi"})
    '<h1>hi</h1>'
    """
    text = template
    for key, value in replacements.items():
        text = text.replace("{{" + key + "}}", value)
    return text


# ---------------------------------------------------------------------------
# Declaration fragments
# ---------------------------------------------------------------------------

FN_PROTO_TEMPLATE = (
    '<div class="sectFnProto">'
    '<pre><code class="fnProtoCode">{{CONTENT}}</code></pre>'
    "</div>"
)

TLD_DOCS_TEMPLATE = '<div class="tldDocs">{{CONTENT}}</div>'

PARAMS_TEMPLATE = (
    '<div class="sectParams">'
    '<{{TAG:subheader}} class="sectionHeader">Parameters</{{TAG:subheader}}>'
    '<div class="listParams">{{CONTENT}}</div>'
    "</div>"
)

FN_ERRORS_TEMPLATE = (
    '<div class="sectFnErrors">'
    '<{{TAG:subheader}} class="sectionHeader">Errors</{{TAG:subheader}}>'
    '<div class="tableFnErrors"><dl class="listFnErrors">{{CONTENT}}</dl></div>'
    "</div>"
)

FIELDS_TEMPLATE = (
    '<div class="sectFields">'
    '<{{TAG:subheader}} class="sectionHeader">Fields</{{TAG:subheader}}>'
    '<div class="listFields">{{CONTENT}}</div>'
    "</div>"
)

NAMESPACES_TEMPLATE = (
    '<div class="sectNamespaces">'
    '<{{TAG:subheader}} class="sectionHeader">Namespaces</{{TAG:subheader}}>'
    '<ul class="listNamespaces columns">{{CONTENT}}</ul>'
    "</div>"
)

CONTAINERS_TEMPLATE = (
    '<div class="sectContainers">'
    '<{{TAG:subheader}} class="sectionHeader">Container Types</{{TAG:subheader}}>'
    '<ul class="listContainers columns">{{CONTENT}}</ul>'
    "</div>"
)

LINK_ITEM_TEMPLATE = '<li><a href="{{HREF}}">{{NAME}}</a>{{CONTENT:shortDocs}}</li>'

SHORT_DOCS_TEMPLATE = '<div class="shortDocs">{{CONTENT}}</div>'

DOC_TESTS_TEMPLATE = (
    '<div class="sectDocTests">'
    '<{{TAG:subheader}} class="sectionHeader">Example Usage</{{TAG:subheader}}>'
    '<pre><code class="docTestsCode">{{CONTENT}}</code></pre>'
    "</div>"
)

SOURCE_TEMPLATE = (
    '<div class="sectSource">'
    '<{{TAG:subheader}} class="sectionHeader" id="{{ID:sectSourceHeader}}">Source Code</{{TAG:subheader}}>'
    '<details><summary>Source code</summary><pre><code class="sourceText">{{CONTENT}}</code></pre></details>'
    "</div>"
)

MEMBERS_TEMPLATE = (
    '<div class="{{CLASS}}">'
    '<{{TAG:subheader}} class="sectionHeader">{{HEADER}}</{{TAG:subheader}}>'
    '<div class="{{CONTENT_CLASS}}">{{CONTENT}}</div>'
    "</div>"
)

DECL_TEMPLATE = (
    '<div class="decl">'
    '<{{TAG:header}} id="{{ID:header}}" class="declHeader">'
    '<span class="declHeaderCategory">{{CONTENT:declHeaderCategory}}</span>'
    '<span class="declHeaderIdentifier">{{CONTENT:declHeaderIdentifier}}</span>'
    '<a href="#{{ID:sectSourceHeader}}">[src]</a>'
    "</{{TAG:header}}>"
    "{{CONTENT:fnProto}}"
    "{{CONTENT:tldDocs}}"
    "{{CONTENT:params}}"
    "{{CONTENT:listFnErrors}}"
    "{{CONTENT:namespaces}}"
    "{{CONTENT:containers}}"
    "{{CONTENT:types}}"
    "{{CONTENT:fields}}"
    "{{CONTENT:globalVars}}"
    "{{CONTENT:values}}"
    "{{CONTENT:errSets}}"
    "{{CONTENT:fns}}"
    "{{CONTENT:docTests}}"
    "{{CONTENT:source}}"
    "</div>"
)

NAV_ITEM_TEMPLATE = '<li><a href="{{HREF}}" class="{{CLASS}}">{{NAME}}</a></li>'

# Member bucket -> (template key, heading, section class, list class)
MEMBER_SECTIONS: tuple[tuple[str, str, str, str, str], ...] = (
    ("types", "CONTENT:types", "Types", "sectTypes", "listTypes"),
    ("variables", "CONTENT:globalVars", "Global Variables", "sectGlobalVars", "listGlobalVars"),
    ("values", "CONTENT:values", "Values", "sectValues", "listValues"),
    ("functions", "CONTENT:fns", "Functions", "sectFns", "listFns"),
    ("error_sets", "CONTENT:errSets", "Error Sets", "sectErrSets", "listErrSets"),
)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

PAGE_TEMPLATE = """<!doctype html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{TITLE}} - Documentation</title>
    <style type="text/css">
      body {
        font-family: system-ui, -apple-system, Roboto, "Segoe UI", sans-serif;
        margin: 0 auto;
        max-width: 60em;
        padding: 0 1em 2em;
        line-height: 1.5;
        color: #141414;
        background-color: #ffffff;
      }
      a { color: #2a6286; text-decoration: none; }
      a:hover { text-decoration: underline; }
      pre, code { font-family: ui-monospace, "SFMono-Regular", Menlo, monospace; font-size: 0.95em; }
      pre { background-color: #f5f5f5; padding: 0.5em; overflow-x: auto; }
      #listNav { list-style: none; padding: 0; margin: 1em 0; display: flex; flex-wrap: wrap; }
      #listNav li + li::before { content: "."; padding: 0 0.1em; }
      #listNav a.active { font-weight: bold; color: #141414; }
      .declHeader { border-bottom: 1px solid #e0e0e0; }
      .declHeaderCategory { font-size: 0.7em; color: #707070; text-transform: uppercase; margin-right: 0.5em; }
      .declHeader > a { font-size: 0.6em; margin-left: 0.5em; }
      .decl .decl { margin-left: 1em; }
      .columns { column-width: 18em; }
      .shortDocs { color: #505050; font-size: 0.9em; }
      dl.listFnErrors dt { font-weight: bold; }
      @media (prefers-color-scheme: dark) {
        body { color: #bbbbbb; background-color: #111111; }
        a { color: #88c3ec; }
        pre { background-color: #1c1c1c; }
        #listNav a.active { color: #dddddd; }
      }
    </style>
  </head>
  <body>
    <nav>
      <div id="sectNav"><ul id="listNav">{{CONTENT:listNav}}</ul></div>
    </nav>
    <section>{{CONTENT:body}}</section>
  </body>
</html>
"""

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>{{TITLE}}: Redirecting</title>
    <meta http-equiv="refresh" content="0; url={{URL}}" />
</head>
<body>
    <p>Redirecting to documentation for <a href="{{URL}}">{{TITLE}}</a>.</p>
</body>
</html>
"""
