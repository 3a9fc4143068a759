# compiletools

Pieces for writing a compiler test harness in Python. The package runs
programs and collects their output, checks that output against expectations
written in test files, normalises it so it can be compared across machines,
and builds the command lines, debugger scripts and environments a harness
needs. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the package's own tests:

```
pip install .[test]
pytest
```

## Modules

### `compiletools.procout`: running processes

- `run_process(argv, lib_path, aux_path=None, input=None, env=None, cwd=None)`
  starts `argv` with `lib_path` (and `aux_path`, if given) put in front of the
  dynamic library search variable, writes `input` to its standard input,
  reads stdout and stderr together and returns a `ProcRes`. Raises
  `RuntimeError` if the program cannot be started.
- `ProcRes` holds `returncode`, `stdout`, `stderr` and `cmdline`.
  `success()` is true for exit code 0; `status` describes the exit status;
  `report(err)` renders status, command and both outputs; `fatal(err)` prints
  that report and raises `ProcFailure`, which carries the `ProcRes` as
  `proc_res`.
- `ProcOutput` is an output buffer that, once more than 160 KiB + 256 KiB
  has arrived, keeps the first 160 KiB and the last 256 KiB and puts a
  `<<<<<< SKIPPED n BYTES >>>>>>` marker between them in `into_bytes()`.
- `read2_abbreviated(process)` reads a `subprocess.Popen`'s two output pipes
  into such buffers and waits for it.
- `dylib_env_var()` names the library search variable of the running
  platform (`PATH`, `DYLD_LIBRARY_PATH`, `LIBRARY_PATH` or
  `LD_LIBRARY_PATH`); `build_library_path(lib_path, aux_path, current)`
  builds its new value.
- `aggressive_rm_rf(path)` removes a directory tree, clearing read-only
  files on Windows.

### `compiletools.uidiff`: line diff with wildcards

`lines_match(expected, actual)` matches a line where `[..]` in the expected
line stands for any text. `diff_lines(actual, expected)` returns one entry for
every line position at which the texts differ.

### `compiletools.checks`: output checks

- `check_error_patterns(output, patterns, must_compile_successfully)`
  requires the patterns to appear in the output lines in order.
- `check_debugger_output(stdout, check_lines)` requires each check line to
  match some later output line; `check_single_line(line, check_line)` does
  one match, with `[...]` standing for any text.
- `find_forbidden_output(output, forbidden)` returns the forbidden patterns
  present; `has_compiler_crash(stderr)` looks for an internal compiler error.

Failed checks raise `CheckError`, whose `missing` lists what was not found.

### `compiletools.normalize`: flags and output normalisation

- `split_maybe_args(argstr)` splits a flag string on spaces (`None` gives
  `[]`); `cleanup_debug_info_options(options)` drops `-O`, `-g` and
  `--debuginfo`.
- `normalize_output(output, parent_dir, build_base, compile_flags=(),
  custom_rules=(), src_dir=None)` replaces those directories with `$DIR`,
  `$SRC_DIR` and `$TEST_BUILD_DIR`, unescapes newlines when the flags ask for
  JSON output, turns backslashes into `/`, `\r\n` into `\n` and tabs into
  `\t`, then applies the `(regex, replacement)` rules, where `$name` or
  `${name}` in a replacement refers to a group. An invalid regex raises
  `ValueError`.
- `compare_source(expected, actual)` prints both texts and raises
  `SourceMismatch` when they differ.

### `compiletools.mircheck`: MIR dump checks

`parse_mir_expectations(text)` reads the `// START name` ... `// END name`
blocks after a `// END RUST SOURCE` marker, with `// ...` lines as
`Elision()`. `compare_mir_output(dumped, expected)` matches a dump against
one block, comparing lines without comments and whitespace
(`normalize_mir_line`, `nocomment_mir_line`).
`check_mir_timestamp(source_file, output_file, test_name)` rejects a dump
older than its test source. Failures raise `MirMismatch`.

### `compiletools.codegen`: codegen unit checks

`TransItem.from_str("TRANS_ITEM name @@ cgu1 cgu2")` parses an item.
`compare_trans_items(expected, actual)` returns a `CodegenUnitReport` with
`missing`, `unexpected` and `wrong_cgus`; `ok()` tells whether all three are
empty and `render()` formats them. `codegen_units_to_str(cgus)` lists unit
names sorted.

### `compiletools.doctest`: documentation test coverage

`doc_test_lines(content)` returns the line numbers on which documentation
code blocks open, and the modules declared with `mod name;`.
`check_doc_test_output(stdout, files)` checks that every `test path - ...
(line n)` entry names a known block and every block was run, returning the
number of matched tests or raising `DocTestMismatch`.

### `compiletools.debugger`: debugger scripts

`find_breakpoint_lines(text)` finds lines containing `#break`.
`gdb_script(...)` and `lldb_script(...)` build the command scripts that set
those breakpoints, run the given commands and quit; `gdb_charset(platform)`
picks the charset GDB is told to use.

### `compiletools.layout`: output locations

`output_base_name`, `make_exe_name`, `aux_output_dir_name`, `make_out_name`,
`incremental_dir` and `mir_dump_dir` compute where a test's products go.
`aux_test_paths(file, relative_dir, rel_ab)` locates an auxiliary source in
the test's `auxiliary/` directory, raising `FileNotFoundError` if it is
absent.

### `compiletools.commands`: command lines

`build_compile_args(settings, input_file, output, allow_unused)` assembles a
compiler command from a `CompileSettings`; `output` is `("file", path)` or
`("dir", path)`. `default_allow_unused(mode)` is true for `compile-fail` and
`ui`. `run_args(runtool, target, nodejs, src_base, exe_file, run_flags)`
returns the program and arguments that run a compiled test, under NodeJS for
emscripten and wasm32 targets.

### `compiletools.uicompare`: expected-output files

`load_expected_output(path)` returns a file's text or `""` if it is missing;
`delete_file(path)` removes a file if present.
`compare_output(kind, actual, expected, output_file, bless=False,
blessed_path=None)` prints a diff, saves the actual output (or deletes the
files when it is empty) and returns 1 for a mismatch, 0 when equal or when
blessing.

### `compiletools.rmake`: Makefile-driven tests

`RmakeSettings.environment(cwd, tmpdir)` returns the environment for running
make, with `RUSTFLAGS` removed. `make_program(host)` chooses `make` or
`gmake`; `msvc_cflags(cflags)` rewrites `/flag` arguments as `-flag`.

## Example

```python
from compiletools.checks import check_error_patterns
from compiletools.procout import run_process
from compiletools.uidiff import diff_lines

assert diff_lines("error: foo at line 3", "error: [..] at line 3") == []

result = run_process(["python3", "-c", "import sys; sys.exit('meep')"], lib_path="")
check_error_patterns(result.stderr, ["meep"])
```

## What the package does not do

It provides the parts of a harness, not a harness: there is no command and no
function that discovers test files, reads their header directives and runs a
whole suite. It does not parse the compiler's JSON diagnostics, does not
apply fix suggestions, and has no helpers for reading target triples.