# guardagent

A small guardrail proxy that sits in front of an OpenAI-compatible chat
completion endpoint. User messages are checked against a set of rules before
they are forwarded. Model replies are checked again before they are returned.
Uploaded files are checked by name and by content. Each blocked request is
recorded in a JSON-lines log, which can be queried and pruned over HTTP.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration

The agent reads two YAML files. By default they are `config/config.yaml` and
`config/rules.yaml`, relative to the working directory.

`config/config.yaml` (keys it does not know are ignored):

```yaml
listen: ":8080"                 # host:port; an empty host listens on all interfaces
model_url: "http://localhost:8000/v1/chat/completions"
model_name: "my-model"          # used in requests built from uploads
api_key: "placeholder"          # sent as "Authorization: Bearer ..." when non-empty
rules_file: "config/rules.yaml" # read into AppConfig but not used; see --rules
```

`config/rules.yaml`:

```yaml
rules:
  - type: input                 # input, output or filename
    keyword: "forbidden phrase"
    description: "policy violation"
  - type: output
    keyword: "/\\d{6}-\\d{4}/"  # wrapped in slashes: a regular expression
    description: "sensitive identifier"
  - type: filename
    keyword: "confidential"
    description: "restricted document"
```

A plain keyword matches as a case-insensitive substring. A keyword longer
than two characters that starts and ends with `/` is a regular expression,
searched case-sensitively. A regular expression that does not compile never
matches.

The chat text and the text taken from uploads are scanned through a sliding
window of five characters that moves one character at a time. Every distinct
keyword that matches is reported once. Because of the window, a plain keyword
longer than five characters can only match a text of at most five
characters. File names are checked as a whole, and only the first matching
rule is used.

## Running

```
guardagent
```

Options:

| Option         | Default                  | Meaning                                            |
|----------------|--------------------------|----------------------------------------------------|
| `--config`     | `config/config.yaml`     | configuration file                                 |
| `--rules`      | `config/rules.yaml`      | rules file                                         |
| `--log-dir`    | `logs`                   | directory of the block log                         |
| `--web-root`   | `internal/web/templates` | directory served as static pages                   |
| `--web-port`   | `8888`                   | second port on which the same application is served |
| `--no-web`     | off                      | do not start the second port                       |

The command exits with status 1 in these cases:

- a configuration or rules file cannot be read;
- a configuration or rules file is malformed;
- `listen` is not of the form `host:port`;
- the server cannot start.

The application serves these paths:

| Path                   | Purpose                                                                   |
|------------------------|---------------------------------------------------------------------------|
| `/v1/chat/completions` | Checks user messages, forwards the body to `model_url`, checks the reply  |
| `/v1/upload`           | Multipart upload (field `file`); checks the file name and the file content |
| `/api/logs`            | All recorded blocks as a JSON array                                       |
| `/api/delete_logs`     | Takes a JSON array; removes entries whose `time` and `content` are equal to an element's |
| `/`, `/<path>`         | Files from `--web-root` (`index.html` for `/`)                            |

**Blocked chat requests.** A blocked prompt or reply is answered with status
200 and a JSON object. Its `error` field names the matched keywords and their
descriptions.

**Uploads.** A blocked file name or blocked file content is answered with
status 403 and a plain-text message. A missing file is answered with 400.

An upload that passes is saved to the system temporary directory. A request
is then sent to the model. That request carries `model_name` and a `file_url`
part that points at `http://127.0.0.1:8888/tmp/<filename>`. If the model
cannot be reached, the answer is 500.

**The block log.** Blocks are appended to `<log-dir>/guard_log_YYYYMMDD.json`.
The file holds one JSON object per line, with the fields `time`,
`guard_type`, `type`, `content` and `keyword`. When the agent starts, it loads
the entries from the current day's file again.

## Using it from Python

```python
from guardagent.rules import load_rules

rules = load_rules("config/rules.yaml")
hits = rules.match_sliding_window("some user text", "input", 5, 1)
if hits:
    print("blocked:", ", ".join(rule.keyword for rule in hits))
```

The rule functions:

- `RuleSet.match(text, rule_type)` returns the keyword of the first matching
  rule, or `None`.
- `match_all` and `match_sliding_window` return the matching `Rule` objects.
  They keep one rule per keyword, in rule order.
- `get_description(rule_type, keyword)` returns a rule's description, or `""`.

Other building blocks:

- `guardagent.config.load_config(path)` returns an `AppConfig`.
- `guardagent.logstore.GuardLog(path)` keeps the block log. Its methods are
  `load()`, `add(...)`, `entries()` and `delete(selected)`; `delete` returns
  the number of entries it removed.
- `guardagent.agent.create_app(config, rules, log_store)` builds the Flask
  application without the static pages.

## What it does not do

- **Images and audio.** No real recognition is done.
  - `ocr_image` accepts `.png` and `.jpg` paths and always returns the same
    fixed sample text.
  - `speech_to_text` does the same for `.wav` and `.mp3`.
  - `extract_text_from_file` returns only a fixed sample text per extension.
  - Uploaded `.jpeg` images are not read, so their content is not checked.
- **Word documents.** `.docx` uploads are not read, so their content is not
  checked. `parse_file` reads text from PDF, `.txt` and `.md` files only.
  For PDFs it reads text operators in uncompressed or Flate-compressed
  streams.
- **Log page.** No log page is shipped. The static paths serve whatever lies
  in `--web-root`.
- **Uploaded files.** The files saved for uploads are not served at the
  `/tmp/` address sent to the model.
- **Streaming.** Replies are not streamed. The whole model response is read
  and checked before anything is returned.