# kotlinbridge

A library of build tooling for making Kotlin/JVM libraries callable from
native code, and for packaging and publishing Kotlin libraries to Maven
Central. It has no runtime dependencies outside the standard library.

## Modules

- `kotlinbridge.versions`: Maven versions and version ranges.
  `parse("1.9.23-SNAPSHOT")` returns a `Version` (major, minor, patch,
  qualifier). `parse_range` accepts `"1.7.3"`, `"[1.0,2.0)"`, `"[1.0,]"`,
  `"(,2.0]"`, `"1.7.+"`, `"LATEST"` and `"RELEASE"` and returns a `Range`.
  `Range.matches(version)` tells you whether a version satisfies it.
  `compare(a, b)` returns -1, 0 or 1 and ignores qualifiers. If the text is
  malformed, these functions raise `ValueError`.
- `kotlinbridge.names`: naming helpers. `kotlin_to_mochi_name("getHTTPSStatus")`
  gives `"get_https_status"`. `class_to_extern_name("com.example.MyClass$Builder")`
  gives `"MyClassBuilder"`. `shim_fn_name("OkHttpClient", "newCall")` gives
  `"ok_http_client_new_call"`. `NameRegistry.allocate` hands out unique shim
  names, adding `_2`, `_3`, … when a name comes up again.
- `kotlinbridge.model`: dataclasses that describe a Kotlin API:
  `KotlinType`, `Param`, `FunctionFlags`, `Function`, `Property`,
  `Constructor`, `APIObject`, and the `ClassKind` enum.
- `kotlinbridge.typemap`: turns model types into bridge types.
  - `translate` maps a `KotlinType` to a `MochiType`, for example
    `List<string>`, `Option<int>`, `Pair<string, int>` or an opaque extern
    handle.
  - `translate_function` does the same for a whole function.
  - `translate_class` does it for a class. It skips members that cannot be
    bridged and uses an optional `NameRegistry` to keep names unique.
  - Types that cannot be bridged raise `RefusalError`. Its `reason` is a
    `RefusalReason`, such as an unresolved type parameter, a raw lambda,
    reflection, unsigned integers or a Throwable. `is_refused` returns the
    reason without raising.
- `kotlinbridge.synth`: `synthesize(artifact, classes, output_dir)` writes
  three files to `<output_dir>/java/com/mochi/bridge/<artifact>/` and returns
  that directory:
  - `MochiBridge.java`, with one `@CEntryPoint` method for each bridgeable
    function, constructor and property getter;
  - `MochiHandleRegistry.java`;
  - `MochiJNI.java`.

  The generated entry-point methods return a default value and record the
  Kotlin call in a comment. They do not invoke the Kotlin code themselves.
  `mochi_type_to_java` and `mochi_to_java_camel` are the mapping helpers
  that `synthesize` uses.
- `kotlinbridge.library`: `build_library(spec, out_dir)` takes a
  `LibrarySpec`, writes its Kotlin sources and compiles them into
  `<artifact>-<version>.jar` with `kotlinc`. It also writes a POM and returns
  a `LibraryResult`.
  - If you ask for a sources JAR, it is built with the `jar` tool when that
    tool is available.
  - `kotlinc` is looked up in `KOTLINC_PATH` first, then in
    `/usr/local/bin` and `/opt/homebrew/bin`, then on `PATH`. If it cannot be
    found, `KotlincNotFoundError` is raised.
  - `render_pom` and `write_pom` produce the POM on their own.
- `kotlinbridge.central`: publishing to the Sonatype Central portal.
  - `build_bundle(spec, out_dir)` writes `<artifact>-<version>-bundle.zip`. It
    holds the JAR, the POM and an optional sources JAR, each with `.sha1` and
    `.md5` files. When `gpg_key_id` is set, it also holds `.asc` signatures
    made with `gpg`.
  - `dry_run` checks a bundle's required entries and SHA-1 checksums.
  - `CentralClient.upload` posts a bundle and returns the deployment ID.
    `CentralClient.poll_until_published` polls `check_status` until the
    deployment is `PUBLISHED`.
  - Failures raise `PublishError`.
- `kotlinbridge.orchestrate`: `Driver.build(config)` runs these steps for each
  `LockEntry` in a `Config`:
  1. Check that the cached JAR exists and matches its recorded SHA-256. A
     missing JAR raises `ArtifactNotFoundError`; a wrong hash raises
     `LockMismatchError`.
  2. Synthesise the bridge sources.
  3. Compile the sources to a shared library.

  The result is a `BuildResult` with the unique link directories and library
  names. With `lock_check=True`, only the hash check runs.

## Example

```python
from kotlinbridge.versions import parse, parse_range

r = parse_range("[1.0,2.0)")
assert r.matches(parse("1.7.3"))
assert not r.matches(parse("2.0.0"))
```

```python
from kotlinbridge.central import BundleSpec, CentralClient, build_bundle, dry_run

spec = BundleSpec(
    group_id="com.example",
    artifact_id="mylib",
    version="1.0",
    jar_path="build/mylib-1.0.jar",
    pom_path="build/mylib-1.0.pom",
)
bundle = build_bundle(spec, "dist")
dry_run(bundle, "com.example", "mylib", "1.0")

client = CentralClient(token="token")
deployment_id = client.upload(bundle, dry_run=True)
```

## What it does not do

- It has no command-line interface. It is used as a library.
- It does not read class metadata out of JAR files. `Driver` takes an
  `ingester` callable for that. Without one, every JAR is treated as exposing
  no classes, and an empty bridge is generated.
- It does not run GraalVM `native-image` itself. `Driver` takes a `compiler`
  callable that produces the shared library. Without one, a full build raises
  `GraalVMNotFoundError`.

## Tests

The test suite uses pytest. Install the `test` extra to get it.