# slipbox

Write-side operations for a directory of interconnected Org notes. The
package creates file notes, captures content into them, edits node
metadata, and moves, extracts, promotes or demotes subtrees. The files on
disk stay plain Org text, written as UTF-8.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Concepts

- A **root** is the directory that holds your notes. File paths given to
  the package are relative to it. `slipbox.paths.normalize_relative_org_path`
  checks them: a path must not be absolute, must not contain `..`, and must
  end in `.org`.
- A **node** is either a whole file or one heading in a file. It is
  described by `slipbox.model.NodeRecord`, which holds `node_key`,
  `file_path`, `kind` (`NodeKind.FILE` or `NodeKind.HEADING`), `title`,
  `line` (1-based), `level`, `tags` and `explicit_id`. Node keys have the
  form `file:<path>` or `heading:<path>:<line>`.
- Invalid input, such as an empty title, a bad path, a line that is not a
  heading, or a target inside the subtree being moved, raises
  `slipbox.model.WriteError`, a subclass of `ValueError`. Errors from
  reading or writing files, such as a missing file, are raised as the usual
  `OSError`.

## Creating notes

```python
from pathlib import Path
from slipbox.notes import capture_file_note, append_heading

root = Path("~/notes").expanduser()

outcome = capture_file_note(root, "Reading list")
print(outcome.node_key)        # file:reading-list.org

outcome = append_heading(root, "reading-list.org", "Reading list", "Novels", 1)
print(outcome.node_key)        # heading:reading-list.org:<line>
```

A new file note holds a `#+title:` line, a property drawer with a fresh
UUID `:ID:`, and, when refs are given, a `:ROAM_REFS:` property. If a file
name is already taken, `-1`, `-2`, and so on are added to the stem.

`slipbox.notes` also has these functions:

- `capture_file_note_at(root, file_path, title, refs)` creates a note at a
  chosen path and numbers the name if the path is taken.
- `capture_file_note_at_with_head(root, file_path, title, head, refs)`
  starts the file with the given head text and adds an `:ID:` if the head
  has none.
- `ensure_file_note(root, file_path, title)` creates the note only if it
  does not exist.
- `append_heading_to_node(root, node, heading)` adds a heading as the last
  child of a node.
- `append_heading_at_outline_path(root, file_path, heading, outline_path, head)`
  creates any missing headings along the outline path and adds the heading
  below the last of them.

Each of these returns a `CaptureOutcome` with `absolute_path` and
`node_key`.

## Template capture

`slipbox.pipeline.capture_template(root, target_node, params)` places
content into a note as described by `slipbox.model.CaptureTemplateParams`.
The file it writes to is chosen in this order:

1. the target node's file, if a target node is given;
2. otherwise `params.file_path`;
3. otherwise a new file named after the slug of `params.title`.

If the file does not exist yet, it starts with `params.head`. Without a
head, it starts with a `#+title:` line. In both cases it gets an `:ID:`
and the normalised refs. A non-empty `outline_path` finds or creates
nested headings, and the content is placed below the last of them.

`params.capture_type` (`CaptureContentType`) selects how the content is
placed:

- `ENTRY` adds a new heading. Headings in the content are shifted to the
  right level. The result's key points at the new heading.
- `PLAIN` adds text to the body of the file or heading.
- `ITEM` and `CHECKITEM` add a list item. The item joins the first list in
  the target and follows its bullet or numbering, and ordered lists are
  renumbered. If the target has no list, a new `-` list is started.
- `TABLE_LINE` adds a row to the first table in the target, creating a
  table if there is none. `table_line_pos` takes specs such as `I+1` or
  `II-1`, which count from the first or second horizontal rule.

`prepend` places content at the start instead of the end.
`empty_lines_before` and `empty_lines_after` ask for blank-line padding.

`preview_capture_template(root, target_node, params, source_override, ensure_node_id)`
does the same work without writing to disk. It returns a
`CapturePreviewOutcome` whose `content` holds the rendered file. It can
work on given text instead of the file, and can add an `:ID:` to the
captured node.

## Metadata

- `slipbox.metadata.ensure_node_id(root, node)` adds an `:ID:` property to
  a file or heading that has none.
- `update_node_metadata(root, node, update)` sets aliases
  (`:ROAM_ALIASES:`), refs (`:ROAM_REFS:`) and tags from a
  `MetadataUpdate`. For a file node the tags go into `#+filetags:`; for a
  heading node they go onto the heading line. A field left as `None` is not
  changed, and an empty list removes the value.

## Restructuring

`slipbox.rewrite` provides these functions:

- `refile_subtree(root, source, target)` moves a heading, or a whole file
  as a heading, under another node. A source file that is left empty is
  deleted.
- `refile_region(root, source_file_path, start, end, target)` moves the
  text between 1-based character positions under a target node.
- `extract_subtree(root, source, file_path)` turns a heading into a new
  file note that keeps the heading's ID.
- `demote_entire_file(root, file_path)` turns a file into a single
  top-level heading.
- `promote_entire_file(root, file_path)` turns a file that consists of one
  top-level heading back into a file note.

Subtree moves return a `RewriteOutcome` with `changed_paths`,
`removed_paths` and the moved node's `explicit_id`. Region moves return a
`RegionRewriteOutcome`.

## Lower-level pieces

- `slipbox.document.OrgDocument` holds a file as lines and edits its
  outline, property drawers and keywords.
- `slipbox.outline` and `slipbox.properties` provide the line-level helpers
  used by `OrgDocument`.
- `slipbox.content` places captured content into an `OrgDocument` at a
  `CaptureTarget`.

## What this package does not do

The package only writes files. It does not scan or index notes, and it has
no database, no search, no command-line program and no server. You supply
the `NodeRecord` values that the functions take, for example from your own
index of the notes directory.