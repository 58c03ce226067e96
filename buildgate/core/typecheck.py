"""
Single-file type-check for declaration files.

Declaration files often reference each other by relative path, so a file that
parses fine on its own can still be broken after packaging. Each file is
compiled on its own with the project's real compiler options, using the
TypeScript compiler API installed under the project root.
"""
from __future__ import annotations

from loguru import logger

from buildgate.config import BuildConfig
from buildgate.core.runtime import NodeLaunchError, run_node
from buildgate.errors import TypeCheckError

# argv: [node, tsconfigPath, rootDir, filePath]
# Exit 0 when clean, 1 with formatted diagnostics on stdout, 2 on setup errors.
TYPECHECK_SCRIPT = r"""
const [tsconfigPath, rootDir, filePath] = process.argv.slice(1);
let ts;
try {
  ts = require(require.resolve('typescript', { paths: [rootDir] }));
} catch (e) {
  console.error('typescript is not installed under ' + rootDir);
  process.exit(2);
}
const read = ts.readConfigFile(tsconfigPath, ts.sys.readFile);
if (read.error) {
  console.error(ts.flattenDiagnosticMessageText(read.error.messageText, '\n'));
  process.exit(2);
}
const parsed = ts.parseJsonConfigFileContent(read.config, ts.sys, rootDir, undefined, tsconfigPath);
const program = ts.createProgram([filePath], parsed.options);
const diagnostics = program.getSemanticDiagnostics().concat(program.getSyntacticDiagnostics());
if (diagnostics.length > 0) {
  const host = {
    getCurrentDirectory: () => ts.sys.getCurrentDirectory(),
    getNewLine: () => ts.sys.newLine,
    getCanonicalFileName: (f) => f,
  };
  process.stdout.write(ts.formatDiagnostics(diagnostics, host));
  process.exitCode = 1;
}
"""


async def check_declaration_file(config: BuildConfig, path: str) -> None:
    """Raise TypeCheckError carrying the rendered diagnostics if the file does not compile."""
    logger.bind(path=path).debug("type-check {}", path)
    try:
        result = await run_node(
            config,
            ["-e", TYPECHECK_SCRIPT, config.tsconfig_path, config.root_dir, path],
        )
    except NodeLaunchError as e:
        raise TypeCheckError(path, str(e)) from e

    if result.ok:
        return
    if result.returncode == 1 and result.stdout.strip():
        raise TypeCheckError(path, result.stdout.rstrip())
    raise TypeCheckError(path, result.output())
