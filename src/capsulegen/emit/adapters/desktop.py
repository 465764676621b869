"""
Desktop emitter.

Tauri shell around a vanilla JavaScript UI. Components are camelCase
factory functions ``name(props, children)`` returning DOM elements.
"""

from __future__ import annotations

import json
from textwrap import dedent

from capsulegen.core.coercion import CoercedProp
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.ir import CapsuleDefinition, NavigationType, PlatformImpl, Screen, Target
from capsulegen.core.resolver import ResolvedScreen
from capsulegen.core.strings import to_kebab_case
from capsulegen.emit.literals import JavaScriptLiterals, comment_text
from capsulegen.emit.theme import css_variables

from .base import GENERATED_BANNER, EmitterRegistry, TargetEmitter
from .web import npm_dependencies

TAURI_VERSION = "^1.5.0"

BASE_DEPENDENCIES = {"@tauri-apps/api": TAURI_VERSION}
DEV_DEPENDENCIES = {"@tauri-apps/cli": TAURI_VERSION, "vite": "^5.0.0"}

JS_RESERVED_WORDS = frozenset(
    {
        "arguments", "await", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
        "extends", "false", "finally", "for", "function", "if", "implements", "import",
        "in", "instanceof", "interface", "let", "new", "null", "package", "private",
        "protected", "public", "return", "static", "super", "switch", "this", "throw",
        "true", "try", "typeof", "undefined", "var", "void", "while", "with", "yield",
    }
)


def _is_comment(lines: list[str]) -> bool:
    return len(lines) == 1 and lines[0].lstrip().startswith("//")


class DesktopEmitter(TargetEmitter):
    """Generate a Tauri desktop project."""

    target = Target.DESKTOP
    literals = JavaScriptLiterals()
    indent_unit = "  "
    pascal_names = False
    reserved_words = JS_RESERVED_WORDS

    @property
    def app_id(self) -> str:
        configured = self.project.platform_config.desktop.app_id
        return configured or f"com.example.{to_kebab_case(self.project.name) or 'app'}"

    # Paths

    def component_path(self, capsule: CapsuleDefinition) -> str:
        return f"src/components/{self.component_name(capsule)}.js"

    def screen_path(self, screen: Screen) -> str:
        return f"src/screens/{self.screen_name(screen)}.js"

    # Call sites

    def argument(self, prop: CoercedProp) -> str:
        return f"{prop.name}: {self.literals.prop(prop)}"

    def render_call(
        self,
        name: str,
        args: list[str],
        children: list[list[str]],
        level: int,
    ) -> list[str]:
        pad = self.indent(level)
        inner = self.indent(level + 1)

        if not args:
            head = [f"{pad}{name}({{}}" if children else f"{pad}{name}("]
        elif len(args) <= self.max_inline_args:
            head = [f"{pad}{name}({{ {', '.join(args)} }}"]
        else:
            head = [f"{pad}{name}({{", *(f"{inner}{arg}," for arg in args), f"{pad}}}"]

        if not children:
            head[-1] += ")"
            return head

        head[-1] += ", ["
        body: list[str] = []
        for child in children:
            if _is_comment(child):
                body += child
            else:
                body += [*child[:-1], child[-1] + ","]
        return [*head, *body, f"{pad}])"]

    # Stages

    def component_file(self, capsule: CapsuleDefinition, impl: PlatformImpl) -> str:
        header = f"// {comment_text(capsule.name)} capsule v{comment_text(capsule.version)}. {GENERATED_BANNER}\n"
        return header + impl.source_code.strip("\n") + "\n"

    def component_index(self, capsules: list[CapsuleDefinition]) -> list[tuple[str, str]]:
        lines = [f"// {GENERATED_BANNER}"]
        for capsule in capsules:
            name = self.component_name(capsule)
            lines.append(f"export {{ {name} }} from './{name}.js'")
        return [("src/components/index.js", "\n".join(lines) + "\n")]

    def screen_file(self, screen: ResolvedScreen) -> str:
        name = self.screen_name(screen.screen)
        lines = [f"// {comment_text(screen.screen.name)} screen. {GENERATED_BANNER}"]
        components = self.visible_components(screen)
        if components:
            lines.append(f"import {{ {', '.join(components)} }} from '../components/index.js'")
        lines += ["", f"export function {name}() {{"]

        body = self.body_lines(screen, 1)
        if body is None:
            lines.append(f"  // {self.placeholder_text(screen.root)}")
            lines.append("  return null")
        else:
            lines += [f"  return {body[0].lstrip()}", *body[1:]]
        lines.append("}")
        return "\n".join(lines) + "\n"

    def screen_registry(self, screens: list[ResolvedScreen]) -> list[tuple[str, str]]:
        lines = [f"// {GENERATED_BANNER}"]
        for screen in screens:
            name = self.screen_name(screen.screen)
            lines.append(f"import {{ {name} }} from './{name}.js'")
        lines += ["", "export const screens = ["]
        for screen in screens:
            lines.append(
                f"  {{ id: {self.literals.string(screen.screen.id)}, "
                f"name: {self.literals.string(screen.screen.name)}, "
                f"render: {self.screen_name(screen.screen)} }},"
            )
        lines.append("]")
        return [("src/screens/index.js", "\n".join(lines) + "\n")]

    def main_js(self) -> str:
        """Entry script arranging the screens per the project's navigation."""
        initial = self.project.initial_screen_index()
        mode = self.project.navigation_mode()

        if mode == NavigationType.STACK:
            return dedent(f"""\
                // {GENERATED_BANNER}
                import {{ screens }} from './screens/index.js'

                const main = document.createElement('main')
                main.className = 'app-main'
                const view = screens[{initial}]?.render()
                if (view) main.appendChild(view)
                document.getElementById('app').appendChild(main)
                """)

        container = "aside" if mode == NavigationType.DRAWER else "nav"
        layout = "app-drawer" if mode == NavigationType.DRAWER else "app-tabs"
        return dedent(f"""\
            // {GENERATED_BANNER}
            import {{ screens }} from './screens/index.js'

            const root = document.getElementById('app')
            root.className = '{layout}'
            const nav = document.createElement('{container}')
            nav.className = 'app-nav'
            const main = document.createElement('main')
            main.className = 'app-main'

            function show(index) {{
              main.replaceChildren()
              const view = screens[index].render()
              if (view) main.appendChild(view)
              nav.querySelectorAll('button').forEach((b, i) => b.classList.toggle('is-selected', i === index))
            }}

            screens.forEach((screen, index) => {{
              const item = document.createElement('button')
              item.textContent = screen.name
              item.addEventListener('click', () => show(index))
              nav.appendChild(item)
            }})

            root.appendChild(nav)
            root.appendChild(main)
            show({initial})
            """)

    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        project = self.project
        window = project.platform_config.desktop.window
        title = comment_text(project.name)
        crate = to_kebab_case(project.name) or "app"

        package = {
            "name": crate,
            "private": True,
            "version": project.version,
            "description": project.description,
            "type": "module",
            "scripts": {
                "dev": "vite",
                "build": "vite build",
                "tauri": "tauri",
            },
            "dependencies": npm_dependencies(BASE_DEPENDENCIES, dependencies.dependencies),
            "devDependencies": DEV_DEPENDENCIES,
        }

        tauri_conf = {
            "build": {
                "beforeDevCommand": "npm run dev",
                "beforeBuildCommand": "npm run build",
                "devPath": "http://localhost:5173",
                "distDir": "../dist",
            },
            "package": {"productName": title, "version": project.version},
            "tauri": {
                "allowlist": {"all": False},
                "bundle": {"active": True, "identifier": self.app_id, "targets": "all"},
                "windows": [
                    {
                        "title": title,
                        "width": window.width,
                        "height": window.height,
                        "resizable": window.resizable,
                    }
                ],
            },
        }

        index_html = dedent("""\
            <!doctype html>
            <html lang="en">
              <head>
                <meta charset="UTF-8" />
                <link rel="stylesheet" href="/src/styles.css" />
              </head>
              <body>
                <div id="app"></div>
                <script type="module" src="/src/main.js"></script>
              </body>
            </html>
            """)

        styles = (
            f"/* {GENERATED_BANNER} */\n"
            + css_variables(project.theme)
            + dedent("""\

                body {
                  margin: 0;
                  font-family: system-ui, -apple-system, sans-serif;
                  background: var(--color-background);
                  color: var(--color-text-primary);
                }

                .app-nav {
                  display: flex;
                  gap: 8px;
                  padding: 8px 16px;
                  background: var(--color-surface);
                }

                .app-nav .is-selected {
                  color: var(--color-primary);
                }

                .app-main {
                  padding: 16px;
                }

                .app-drawer {
                  display: flex;
                  min-height: 100vh;
                }

                .app-drawer .app-nav {
                  flex-direction: column;
                  min-width: 200px;
                }
                """)
        )

        q = json.dumps
        cargo_toml = dedent(f"""\
            # {GENERATED_BANNER}
            [package]
            name = {q(crate)}
            version = {q(project.version)}
            edition = "2021"

            [build-dependencies]
            tauri-build = {{ version = "1.5", features = [] }}

            [dependencies]
            serde = {{ version = "1.0", features = ["derive"] }}
            serde_json = "1.0"
            tauri = {{ version = "1.5", features = [] }}

            [features]
            custom-protocol = ["tauri/custom-protocol"]
            """)

        main_rs = dedent(f"""\
            // {GENERATED_BANNER}
            #![cfg_attr(not(debug_assertions), windows_subsystem = "windows")]

            fn main() {{
                tauri::Builder::default()
                    .run(tauri::generate_context!())
                    .expect("error while running tauri application");
            }}
            """)

        return [
            ("package.json", json.dumps(package, indent=2) + "\n"),
            ("index.html", index_html),
            ("src/main.js", self.main_js()),
            ("src/styles.css", styles),
            ("src-tauri/tauri.conf.json", json.dumps(tauri_conf, indent=2) + "\n"),
            ("src-tauri/Cargo.toml", cargo_toml),
            ("src-tauri/src/main.rs", main_rs),
            ("src-tauri/build.rs", "fn main() {\n    tauri_build::build()\n}\n"),
        ]


EmitterRegistry.register(Target.DESKTOP, DesktopEmitter)
