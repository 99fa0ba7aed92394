# schemamigrate

`schemamigrate` reads versioned migrations from a *source* and applies them to
a *database*. The migration logic (which versions to run, in which direction,
how dirty states and locking are handled) lives in this package. Sources and
databases are kept simple.

## Migration files

Sources recognise file names of the form

```
<version>_<identifier>.up.<ext>
<version>_<identifier>.down.<ext>
```

for example `1_create_users.up.sql` and `1_create_users.down.sql`. Versions do
not have to be contiguous, and a version may have only an up or only a down
migration. Names that do not match are skipped. Two files with the same version
and direction are an error.

```python
from schemamigrate.sources.migrations import Direction, parse

m = parse("20170412214116_date_foobar.up.sql")
assert m.version == 20170412214116
assert m.identifier == "date_foobar"
assert m.direction is Direction.UP
```

`parse` raises `ParseError` (a `ValueError`) for names that do not match.
`Migrations` is the ordered index that sources build from parsed names. It has
`append`, `first`, `prev`, `next`, `up` and `down`.

## Sources

Every source implements `schemamigrate.sources.driver.SourceDriver`, with
`first`, `prev`, `next`, `read_up`, `read_down` and `close`. When a version or
file is missing, these methods raise `FileNotFoundError`. `read_up` and
`read_down` return a binary file object together with the migration's
identifier.

- `schemamigrate.sources.file.FileSource` reads a directory on disk. It is
  opened with a `file://` URL, for example
  `FileSource().open("file://./migrations")`. A relative path is resolved
  against the current directory, and an empty path means the current directory.
  `parse_url` performs this conversion.
- `schemamigrate.sources.fs.new(fs, path)` reads migrations found under `path`
  in any tree object that behaves like `pathlib.Path` or `zipfile.Path`.
  Closing the driver also closes the tree, if the tree has a `close()` method.
  `PartialDriver` is the base class for new tree-backed sources. Duplicate files
  raise `DuplicateMigrationError`.
- `schemamigrate.sources.bindata.with_instance(resource(names, asset_func))`
  serves migrations held in memory. Each asset's bytes come from
  `asset_func(name)`. This source cannot be opened from a URL.
- `schemamigrate.sources.stub.StubSource` is an in-memory source for tests. Its
  migration bodies are the migrations' identifiers.

Drivers are registered by URL scheme with `register(name, driver)`. The
package registers `file`, `stub` and `bindata`. `open_source(url)` opens a
driver chosen by the scheme of the URL and raises `ValueError` for an unknown
scheme. `list_drivers()` returns the registered names.

## Running migrations

To run migrations, build a `Migrate` from a source and a database driver. A
database driver is a subclass of `schemamigrate.migrate.DatabaseDriver` that
implements these methods:

- `lock` and `unlock`
- `run`
- `set_version` and `version`
- `drop`
- `close`

```python
from schemamigrate.errors import NoChangeError
from schemamigrate.migrate import new_with_instance
from schemamigrate.sources.file import FileSource

source = FileSource().open("file://./migrations")
database = MyDatabase()  # your DatabaseDriver subclass

with new_with_instance("file", source, "mydb", database) as m:
    try:
        m.up()
    except NoChangeError:
        pass  # already at the latest version
    version, dirty = m.version()
```

Other operations:

- `m.migrate(version)` moves up or down to an exact version.
- `m.steps(n)` applies `n` migrations up (`n > 0`) or down (`n < 0`).
- `m.down()` applies every down migration.
- `m.force(version)` records a version as clean without running anything. `-1`
  means no version.
- `m.drop()` removes everything from the database.
- `m.run(*migrations)` runs the given `schemamigrate.migration.Migration`
  objects as they are.
- `m.request_stop()` stops at the next safe point between migrations.
- `m.close()` closes the source and the database.

`m.prefetch_migrations` sets how many migrations are read ahead in a
background thread. The default is 10, and 0 turns read-ahead off.
`m.lock_timeout` is the number of seconds allowed for taking the database lock.
The default is 15.

Progress is logged through the standard `logging` module under the logger
name `schemamigrate`.

## Errors

Failures are raised as exceptions from `schemamigrate.errors`. All of them
derive from `MigrateError`:

- `NoChangeError`: there is nothing to do.
- `NilVersionError`: no migration has been applied yet.
- `InvalidVersionError`: a forced version is below `-1`.
- `DirtyError`: a previous migration failed part way. Fix the database and
  `force` a version.
- `ShortLimitError`: fewer migrations were available than `steps` asked for.
- `LockedError`: the database lock is already held.
- `LockTimeoutError`: the database lock could not be acquired in time.

A version that the source does not know is reported as `FileNotFoundError`.
If the database lock cannot be released after an error, both errors are raised
together as a `schemamigrate.util.MultiError`.

## What this package does not do

- It ships no database drivers. You supply your own `DatabaseDriver` subclass.
- It has no command-line tool.
- It does not read migrations from remote services such as cloud storage or
  code-hosting sites.
- `Migrate` is built only from driver instances. There is no constructor that
  opens a database from a URL.