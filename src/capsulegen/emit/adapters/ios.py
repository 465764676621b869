"""
iOS emitter.

SwiftUI views in an XcodeGen project. Components live in
``{App}/Components/{Pascal}.swift`` and are instantiated as view calls with
labelled arguments and trailing ``@ViewBuilder`` closures for children.
"""

from __future__ import annotations

import json
from textwrap import dedent
from xml.sax.saxutils import escape

from capsulegen.core.coercion import CoercedProp
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.ir import CapsuleDefinition, NavigationType, PlatformImpl, ProjectSpec, Screen, Target
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.core.resolver import ResolvedScreen
from capsulegen.core.strings import to_kebab_case, to_pascal_case
from capsulegen.emit.literals import SwiftLiterals, comment_text
from capsulegen.emit.theme import swift_colors

from .base import GENERATED_BANNER, EmitterRegistry, TargetEmitter

DEFAULT_DEPLOYMENT_TARGET = "15.0"

# System frameworks that need an Info.plist usage description
USAGE_DESCRIPTIONS = {
    "AVFoundation": ("NSCameraUsageDescription", "This app uses the camera."),
    "LocalAuthentication": ("NSFaceIDUsageDescription", "This app uses Face ID to authenticate you."),
}

# Linked implicitly by every SwiftUI app
IMPLICIT_FRAMEWORKS = {"Foundation", "SwiftUI", "UIKit", "Combine"}

# Capitalised keywords plus the types every generated app declares or conforms to
SWIFT_RESERVED_WORDS = frozenset(
    {"Any", "AnyView", "AppScreen", "AppScreens", "ContentView", "Protocol", "Self", "Type", "View"}
)


class IOSEmitter(TargetEmitter):
    """Generate a SwiftUI project described by an XcodeGen project.yml."""

    target = Target.IOS
    literals = SwiftLiterals()
    reserved_words = SWIFT_RESERVED_WORDS
    indent_unit = "    "

    def __init__(self, project: ProjectSpec, registry: CapsuleRegistry):
        super().__init__(project, registry)
        name = to_pascal_case(project.name).lstrip("_")
        self.app_name = name if name[:1].isalpha() else f"App{name}"

    @property
    def bundle_id(self) -> str:
        configured = self.project.platform_config.ios.bundle_id
        return configured or f"com.example.{to_kebab_case(self.project.name) or 'app'}"

    # Paths

    def component_path(self, capsule: CapsuleDefinition) -> str:
        return f"{self.app_name}/Components/{self.component_name(capsule)}.swift"

    def screen_path(self, screen: Screen) -> str:
        return f"{self.app_name}/Screens/{self.screen_name(screen)}.swift"

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
        body = [line for child in children for line in child]

        if len(args) <= self.max_inline_args:
            if args or not body:
                head = [f"{pad}{name}({', '.join(args)})"]
            else:
                head = [f"{pad}{name}"]
        else:
            head = [f"{pad}{name}("]
            head += [f"{inner}{arg}," for arg in args[:-1]]
            head += [f"{inner}{args[-1]}", f"{pad})"]

        if not body:
            return head
        head[-1] += " {"
        return [*head, *body, f"{pad}}}"]

    # Stages

    def component_file(self, capsule: CapsuleDefinition, impl: PlatformImpl) -> str:
        lines = [f"// {comment_text(capsule.name)} capsule v{comment_text(capsule.version)}. {GENERATED_BANNER}", ""]
        imports = impl.imports or ["SwiftUI"]
        lines += [f"import {module}" for module in imports]
        return "\n".join(lines) + "\n\n" + impl.source_code.strip("\n") + "\n"

    def screen_file(self, screen: ResolvedScreen) -> str:
        name = self.screen_name(screen.screen)
        lines = [
            f"// {comment_text(screen.screen.name)} screen. {GENERATED_BANNER}",
            "",
            "import SwiftUI",
            "",
            f"struct {name}: View {{",
            "    var body: some View {",
        ]
        body = self.body_lines(screen, 2)
        if body is None:
            lines.append(f"        // {self.placeholder_text(screen.root)}")
            lines.append("        EmptyView()")
        else:
            lines += body
        lines += ["    }", "}"]
        return "\n".join(lines) + "\n"

    def screen_registry(self, screens: list[ResolvedScreen]) -> list[tuple[str, str]]:
        lines = [
            f"// {GENERATED_BANNER}",
            "",
            "import SwiftUI",
            "",
            "struct AppScreen: Identifiable {",
            "    let id: String",
            "    let name: String",
            "    let view: AnyView",
            "}",
            "",
            "enum AppScreens {",
            "    static let all: [AppScreen] = [",
        ]
        for screen in screens:
            lines.append(
                f"        AppScreen(id: {self.literals.string(screen.screen.id)}, "
                f"name: {self.literals.string(screen.screen.name)}, "
                f"view: AnyView({self.screen_name(screen.screen)}())),"
            )
        lines += ["    ]", "}"]
        return [(f"{self.app_name}/Screens/AppScreens.swift", "\n".join(lines) + "\n")]

    def project_yml(self, dependencies: AggregatedDependencies, deployment_target: str) -> str:
        """
        XcodeGen spec.

        Capsule dependencies are Swift package products, either ``Name`` (a
        local package under ``Packages/``) or ``Name@url``. Non-implicit
        imports are linked as SDK frameworks.
        """
        app = self.app_name
        q = json.dumps
        lines = [
            f"# {GENERATED_BANNER}",
            f"name: {q(app)}",
            "options:",
            f"  bundleIdPrefix: {q(self.bundle_id.rsplit('.', 1)[0])}",
            "  deploymentTarget:",
            f"    iOS: {q(deployment_target)}",
        ]

        packages = []
        for spec in dependencies.dependencies:
            name, _, url = spec.partition("@")
            packages.append((name, url))
        if packages:
            lines.append("packages:")
            for name, url in packages:
                lines.append(f"  {q(name)}:")
                if url:
                    lines.append(f"    url: {q(url)}")
                    lines.append("    branch: main")
                else:
                    lines.append(f"    path: {q('Packages/' + name)}")

        lines += [
            "targets:",
            f"  {q(app)}:",
            "    type: application",
            "    platform: iOS",
            f"    sources: [{q(app)}]",
            "    settings:",
            "      base:",
            f"        PRODUCT_BUNDLE_IDENTIFIER: {q(self.bundle_id)}",
            f"        MARKETING_VERSION: {q(self.project.version)}",
            f"        INFOPLIST_FILE: {q(app + '/Info.plist')}",
        ]
        frameworks = [m for m in dependencies.imports if m not in IMPLICIT_FRAMEWORKS]
        if packages or frameworks:
            lines.append("    dependencies:")
            lines += [f"      - package: {q(name)}" for name, _ in packages]
            lines += [f"      - sdk: {q(module + '.framework')}" for module in frameworks]
        return "\n".join(lines) + "\n"

    def info_plist(self, dependencies: AggregatedDependencies) -> str:
        entries = [
            ("CFBundleDisplayName", comment_text(self.project.name)),
            ("CFBundleExecutable", "$(EXECUTABLE_NAME)"),
            ("CFBundleIdentifier", "$(PRODUCT_BUNDLE_IDENTIFIER)"),
            ("CFBundleName", "$(PRODUCT_NAME)"),
            ("CFBundlePackageType", "APPL"),
            ("CFBundleShortVersionString", "$(MARKETING_VERSION)"),
            ("CFBundleVersion", "1"),
        ]
        for module in dependencies.imports:
            if module in USAGE_DESCRIPTIONS:
                entries.append(USAGE_DESCRIPTIONS[module])

        body = "\n".join(
            f"    <key>{escape(key)}</key>\n    <string>{escape(value)}</string>" for key, value in entries
        )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
            '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
            '<plist version="1.0">\n<dict>\n'
            f"{body}\n"
            "    <key>UILaunchScreen</key>\n    <dict/>\n"
            "</dict>\n</plist>\n"
        )

    def content_view(self) -> str:
        """Entry view arranging the screens per the project's navigation."""
        initial = self.project.initial_screen_index()
        mode = self.project.navigation_mode()

        if mode == NavigationType.TABS:
            body = dedent(f"""\
                @State private var selection = AppScreens.all[{initial}].id

                var body: some View {{
                    TabView(selection: $selection) {{
                        ForEach(AppScreens.all) {{ screen in
                            screen.view
                                .tabItem {{ SwiftUI.Text(screen.name) }}
                                .tag(screen.id)
                        }}
                    }}
                    .tint(.themePrimary)
                }}
                """)
        elif mode == NavigationType.DRAWER:
            title = self.literals.string(self.project.name)
            body = dedent(f"""\
                @State private var selection: String? = AppScreens.all[{initial}].id

                var body: some View {{
                    NavigationView {{
                        List(AppScreens.all) {{ screen in
                            NavigationLink(screen.name, tag: screen.id, selection: $selection) {{
                                screen.view
                            }}
                        }}
                        .navigationTitle({title})
                        AppScreens.all[{initial}].view
                    }}
                    .tint(.themePrimary)
                }}
                """)
        else:
            entry = f"AppScreens.all[{initial}].view" if self.project.screens else "EmptyView()"
            body = dedent(f"""\
                var body: some View {{
                    NavigationView {{
                        {entry}
                    }}
                    .navigationViewStyle(.stack)
                }}
                """)

        lines = [f"// {GENERATED_BANNER}", "", "import SwiftUI", "", "struct ContentView: View {"]
        lines += [f"    {line}" if line else "" for line in body.splitlines()]
        lines.append("}")
        return "\n".join(lines) + "\n"

    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        app = self.app_name
        deployment_target = dependencies.min_version or DEFAULT_DEPLOYMENT_TARGET

        app_swift = dedent(f"""\
            // {GENERATED_BANNER}

            import SwiftUI

            @main
            struct {app}App: App {{
                var body: some Scene {{
                    WindowGroup {{
                        ContentView()
                    }}
                }}
            }}
            """)

        return [
            ("project.yml", self.project_yml(dependencies, deployment_target)),
            (f"{app}/{app}App.swift", app_swift),
            (f"{app}/ContentView.swift", self.content_view()),
            (f"{app}/Theme/Theme.swift", f"// {GENERATED_BANNER}\n\n" + swift_colors(self.project.theme)),
            (f"{app}/Info.plist", self.info_plist(dependencies)),
        ]


EmitterRegistry.register(Target.IOS, IOSEmitter)
