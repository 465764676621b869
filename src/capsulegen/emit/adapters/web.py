"""
Web emitter.

React + Vite + TypeScript. Components are ``src/components/{Pascal}.tsx``,
screens are ``src/screens/{Pascal}Screen.tsx`` and instantiation is JSX.
"""

from __future__ import annotations

import html
import json
from textwrap import dedent

from capsulegen.core.coercion import CoercedProp
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.ir import CapsuleDefinition, NavigationType, PlatformImpl, Screen, Target
from capsulegen.core.resolver import ResolvedNode, ResolvedScreen
from capsulegen.core.strings import to_kebab_case
from capsulegen.emit.literals import JSXAttributeLiterals, comment_text
from capsulegen.emit.theme import css_variables

from .base import GENERATED_BANNER, EmitterRegistry, TargetEmitter

BASE_DEPENDENCIES = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
}

DEV_DEPENDENCIES = {
    "@types/react": "^18.2.0",
    "@types/react-dom": "^18.2.0",
    "@vitejs/plugin-react": "^4.2.0",
    "typescript": "^5.3.0",
    "vite": "^5.0.0",
}


def split_npm_spec(spec: str) -> tuple[str, str]:
    """
    Split ``name@range`` (scoped names allowed) into name and range.

    >>> split_npm_spec("lucide-react@^0.344.0")
    ('lucide-react', '^0.344.0')
    >>> split_npm_spec("@tauri-apps/api")
    ('@tauri-apps/api', 'latest')
    """
    index = spec.rfind("@")
    if index > 0:
        return spec[:index], spec[index + 1 :] or "latest"
    return spec, "latest"


def npm_dependencies(base: dict[str, str], declared: list[str]) -> dict[str, str]:
    """Base dependencies merged with capsule declarations, sorted by name."""
    merged = dict(base)
    for spec in declared:
        name, version = split_npm_spec(spec)
        if name not in merged or version != "latest":
            merged[name] = version
    return dict(sorted(merged.items()))


class WebEmitter(TargetEmitter):
    """Generate a React/TypeScript project."""

    target = Target.WEB
    literals = JSXAttributeLiterals()
    reserved_words = frozenset({"React"})
    indent_unit = "  "

    # Paths

    def component_path(self, capsule: CapsuleDefinition) -> str:
        return f"src/components/{self.component_name(capsule)}.tsx"

    def screen_path(self, screen: Screen) -> str:
        return f"src/screens/{self.screen_name(screen)}.tsx"

    # Call sites

    def argument(self, prop: CoercedProp) -> str:
        return self.literals.attribute(prop)

    def placeholder(self, node: ResolvedNode) -> str:
        return "{/* " + self.placeholder_text(node) + " */}"

    def render_call(
        self,
        name: str,
        args: list[str],
        children: list[list[str]],
        level: int,
    ) -> list[str]:
        pad = self.indent(level)
        body = [line for child in children for line in child]

        if len(args) <= self.max_inline_args:
            opening = f"{pad}<{name}" + "".join(f" {arg}" for arg in args)
            if not body:
                return [f"{opening} />"]
            return [f"{opening}>", *body, f"{pad}</{name}>"]

        inner = self.indent(level + 1)
        lines = [f"{pad}<{name}", *(f"{inner}{arg}" for arg in args)]
        if not body:
            lines.append(f"{pad}/>")
            return lines
        return [*lines, f"{pad}>", *body, f"{pad}</{name}>"]

    # Stages

    def component_file(self, capsule: CapsuleDefinition, impl: PlatformImpl) -> str:
        header = f"// {comment_text(capsule.name)} capsule v{comment_text(capsule.version)}. {GENERATED_BANNER}\n"
        return header + impl.source_code.strip("\n") + "\n"

    def component_index(self, capsules: list[CapsuleDefinition]) -> list[tuple[str, str]]:
        lines = [f"// {GENERATED_BANNER}"]
        for capsule in capsules:
            name = self.component_name(capsule)
            lines.append(f"export {{ {name} }} from './{name}'")
        return [("src/components/index.ts", "\n".join(lines) + "\n")]

    def screen_file(self, screen: ResolvedScreen) -> str:
        name = self.screen_name(screen.screen)
        lines = [f"// {comment_text(screen.screen.name)} screen. {GENERATED_BANNER}", "import React from 'react'"]
        components = self.visible_components(screen)
        if components:
            lines.append(f"import {{ {', '.join(components)} }} from '../components'")
        lines += ["", f"export function {name}() {{"]

        body = self.body_lines(screen, 2)
        if body is None:
            lines.append(f"  // {self.placeholder_text(screen.root)}")
            lines.append("  return null")
        else:
            lines += ["  return (", *body, "  )"]
        lines.append("}")
        return "\n".join(lines) + "\n"

    def screen_registry(self, screens: list[ResolvedScreen]) -> list[tuple[str, str]]:
        lines = [f"// {GENERATED_BANNER}", "import React from 'react'"]
        for screen in screens:
            name = self.screen_name(screen.screen)
            lines.append(f"import {{ {name} }} from './{name}'")
        lines += [
            "",
            "export interface AppScreen {",
            "  id: string",
            "  name: string",
            "  component: React.ComponentType",
            "}",
            "",
            "export const screens: AppScreen[] = [",
        ]
        for screen in screens:
            lines.append(
                f"  {{ id: {self.literals.string(screen.screen.id)}, "
                f"name: {self.literals.string(screen.screen.name)}, "
                f"component: {self.screen_name(screen.screen)} }},"
            )
        lines.append("]")
        return [("src/screens/index.ts", "\n".join(lines) + "\n")]

    def app_tsx(self) -> str:
        """Root component arranging the screens per the project's navigation."""
        initial = self.project.initial_screen_index()
        mode = self.project.navigation_mode()

        if not self.project.screens:
            return dedent("""\
                import React from 'react'

                export default function App() {
                  return <main className="app-main" />
                }
                """)
        if mode == NavigationType.STACK:
            return dedent(f"""\
                import React from 'react'
                import {{ screens }} from './screens'

                export default function App() {{
                  const Screen = screens[{initial}].component
                  return (
                    <div className="app">
                      <main className="app-main">
                        <Screen />
                      </main>
                    </div>
                  )
                }}
                """)

        layout = "app app-drawer" if mode == NavigationType.DRAWER else "app app-tabs"
        container = "aside" if mode == NavigationType.DRAWER else "nav"
        return dedent(f"""\
            import React, {{ useState }} from 'react'
            import {{ screens }} from './screens'

            export default function App() {{
              const [current, setCurrent] = useState({initial})
              const Screen = screens[current].component
              return (
                <div className="{layout}">
                  <{container} className="app-nav">
                    {{screens.map((screen, index) => (
                      <button key={{screen.id}} onClick={{() => setCurrent(index)}} aria-current={{index === current}}>
                        {{screen.name}}
                      </button>
                    ))}}
                  </{container}>
                  <main className="app-main">
                    <Screen />
                  </main>
                </div>
              )
            }}
            """)

    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        project = self.project
        package = {
            "name": to_kebab_case(project.name) or "app",
            "private": True,
            "version": project.version,
            "description": project.description,
            "type": "module",
            "scripts": {
                "dev": "vite",
                "build": "tsc && vite build",
                "preview": "vite preview",
            },
            "dependencies": npm_dependencies(BASE_DEPENDENCIES, dependencies.dependencies),
            "devDependencies": DEV_DEPENDENCIES,
        }

        index_html = dedent(f"""\
            <!doctype html>
            <html lang="en">
              <head>
                <meta charset="UTF-8" />
                <meta name="viewport" content="width=device-width, initial-scale=1.0" />
                <title>{html.escape(comment_text(project.name))}</title>
              </head>
              <body>
                <div id="root"></div>
                <script type="module" src="/src/main.tsx"></script>
              </body>
            </html>
            """)

        vite_config = dedent("""\
            import { defineConfig } from 'vite'
            import react from '@vitejs/plugin-react'

            export default defineConfig({
              plugins: [react()],
            })
            """)

        tsconfig = {
            "compilerOptions": {
                "target": "ES2020",
                "lib": ["ES2020", "DOM", "DOM.Iterable"],
                "module": "ESNext",
                "moduleResolution": "bundler",
                "jsx": "react-jsx",
                "strict": True,
                "skipLibCheck": True,
                "noEmit": True,
            },
            "include": ["src"],
        }

        main_tsx = dedent("""\
            import React from 'react'
            import ReactDOM from 'react-dom/client'
            import App from './App'
            import './theme.css'

            ReactDOM.createRoot(document.getElementById('root')!).render(
              <React.StrictMode>
                <App />
              </React.StrictMode>,
            )
            """)

        theme_css = (
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
                  padding: 12px 16px;
                  background: var(--color-surface);
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

        return [
            ("package.json", json.dumps(package, indent=2) + "\n"),
            ("index.html", index_html),
            ("vite.config.ts", vite_config),
            ("tsconfig.json", json.dumps(tsconfig, indent=2) + "\n"),
            ("src/main.tsx", main_tsx),
            ("src/App.tsx", self.app_tsx()),
            ("src/theme.css", theme_css),
        ]


EmitterRegistry.register(Target.WEB, WebEmitter)
