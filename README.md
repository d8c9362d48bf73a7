# minishell

A small interactive shell. It reads one line at a time, splits it into
words and operators, and runs the result as a command or as a pipeline.

## Installing

    pip install .

## Running

    minishell

The prompt is `minishell$ `. Leave the shell with `exit` or Ctrl-D. Ctrl-C
prints a fresh prompt and the shell keeps running. Ctrl-\ is ignored.

When the shell stops, it returns the status of the last command it ran. A
syntax error, or a redirection file that cannot be opened, prints
`minishell: <message>` to standard error and ends the session with status 1.

## What the shell understands

- **Words** are separated by whitespace. Single and double quotes keep
  spaces and the operators `|`, `<`, `>` inside one word. The quote
  characters themselves are kept in the word, so `echo "a b"` prints
  `"a b"`. A quote that is never closed runs to the end of the line.
- **Pipes**: `cmd1 | cmd2 | cmd3`. The status of a pipeline is the status
  of its last command.
- **Redirections**: `< file` reads input from a file, `> file` truncates
  the file and writes to it, and `>> file` appends to it (new files are
  created with mode 0644). Redirections come after a command's words. Any
  words after the redirections and before the next `|` are ignored. The
  files are opened when the line is parsed, before any command runs.
- **Expansion**: `$NAME`, where the name is made of letters, digits and
  underscores, becomes the value of that variable in the shell's
  environment, or nothing if it is not set. Expansion also happens inside
  quotes. A `$` directly followed by `?` or `$` is removed and the following
  character stays. Any other `$` is kept as it is.
- **Built-ins**:
  - `echo [-n] args...` prints its arguments separated by spaces; `-n`
    leaves out the final newline.
  - `cd [dir]` changes directory, to `$HOME` when no directory is given.
  - `pwd` prints the working directory.
  - `env` prints every variable as `NAME=value`.
  - `export NAME=value ...` sets variables; with no arguments it prints the
    environment like `env`. An argument without `=` is reported as not a
    valid identifier.
  - `unset NAME ...` removes variables.
  - `exit [status]` prints `exit` and stops the shell with the given status,
    or with the last status. A status that is not a number counts as 0.

A built-in that runs alone changes the shell itself. Inside a pipeline it
works on a copy, so `cd`, `export`, `unset` and `exit` there have no lasting
effect.

Any other command is looked up in the `PATH` of the shell's environment,
and runs with that environment. A name that contains a `/` is used as a
path as given. A command that cannot be started prints `execve: <reason>`
and gets status 127. A command killed by a signal gets the signal number as
its status.

## What it does not do

There are no here-documents, no `;`, `&&` or `||`, no background jobs, no
globbing and no quote removal. `$?` and `$$` are not replaced by the last
status or the process id.

## Using it from Python

    import os

    from minishell.state import ShellState
    from minishell.shell import run_line

    state = ShellState.from_environ(os.environ)
    run_line("echo hello | tr a-z A-Z", state)
    print(state.last_status)

`run_line` raises `minishell.state.ShellError` (or its subclass
`minishell.parser.ParseError` for syntax errors) where the interactive shell
would stop.

The pieces can also be used one by one:

- `minishell.lexer.lex(line, state)` returns a list of `Token` objects,
  each with a `TokenType` and a value; `minishell.lexer.expand(word, state)`
  does the variable expansion on its own.
- `minishell.parser.parse(tokens)` builds a `Command` or `Pipe` tree and
  opens the redirection files. Both classes have `close()` and work as
  context managers that close those files.
- `minishell.executor.execute(node, state)` runs a tree and stores its
  status in `state.last_status`.
- `minishell.builtins` holds the built-in commands (`echo`, `cd`, `pwd`,
  `env`, `export`, `unset`, `exit_shell`), along with `is_builtin`,
  `run_builtin` and `search_path`.

## Running the tests

    pip install .[test]
    pytest