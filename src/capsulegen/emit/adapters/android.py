"""
Android emitter.

Jetpack Compose with Gradle Kotlin DSL. Components are composable functions
in ``{pkg}.components``; children go into the trailing content lambda.
"""

from __future__ import annotations

from textwrap import dedent
from xml.sax.saxutils import escape

from capsulegen.core.coercion import CoercedProp
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.ir import CapsuleDefinition, NavigationType, PlatformImpl, ProjectSpec, Screen, Target
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.core.resolver import ResolvedScreen
from capsulegen.core.strings import to_package_segment, to_pascal_case
from capsulegen.emit.literals import KotlinLiterals, comment_text
from capsulegen.emit.theme import kotlin_colors

from .base import GENERATED_BANNER, EmitterRegistry, TargetEmitter

DEFAULT_MIN_SDK = "24"
COMPILE_SDK = 34
COMPOSE_BOM = "androidx.compose:compose-bom:2024.02.00"

_STATE_IMPORTS = [
    "androidx.compose.runtime.getValue",
    "androidx.compose.runtime.mutableIntStateOf",
    "androidx.compose.runtime.remember",
    "androidx.compose.runtime.setValue",
]

BASE_DEPENDENCIES = [
    "androidx.activity:activity-compose:1.8.2",
    "androidx.compose.material3:material3",
    "androidx.compose.ui:ui",
    "androidx.core:core-ktx:1.12.0",
]

# Dependency prefixes that need a manifest permission
PERMISSIONS = {
    "androidx.camera:": "android.permission.CAMERA",
    "androidx.biometric:": "android.permission.USE_BIOMETRIC",
    "io.coil-kt:": "android.permission.INTERNET",
}


def merge_gradle_dependencies(base: list[str], declared: list[str]) -> list[str]:
    """
    Merge Maven coordinates, keeping one entry per ``group:artifact``.

    A declared coordinate with a version wins over an unversioned one.
    """
    merged: dict[str, str] = {}
    for coordinate in [*base, *declared]:
        key = ":".join(coordinate.split(":")[:2])
        if key not in merged or coordinate.count(":") > merged[key].count(":"):
            merged[key] = coordinate
    return sorted(merged.values())


class AndroidEmitter(TargetEmitter):
    """Generate a Jetpack Compose Gradle project."""

    target = Target.ANDROID
    literals = KotlinLiterals()
    reserved_words = frozenset({"AppScreen", "Composable"})
    indent_unit = "    "

    def __init__(self, project: ProjectSpec, registry: CapsuleRegistry):
        super().__init__(project, registry)
        configured = project.platform_config.android.package_name
        self.package = configured or f"com.example.{to_package_segment(project.name)}"
        self.source_root = "app/src/main/java/" + self.package.replace(".", "/")

    # Paths

    def component_path(self, capsule: CapsuleDefinition) -> str:
        return f"{self.source_root}/components/{self.component_name(capsule)}.kt"

    def screen_path(self, screen: Screen) -> str:
        return f"{self.source_root}/screens/{self.screen_name(screen)}.kt"

    # Call sites

    def argument(self, prop: CoercedProp) -> str:
        return f"{prop.name} = {self.literals.prop(prop)}"

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
            head = [f"{pad}{name}(", *(f"{inner}{arg}," for arg in args), f"{pad})"]

        if not body:
            return head
        head[-1] += " {"
        return [*head, *body, f"{pad}}}"]

    # Stages

    def component_file(self, capsule: CapsuleDefinition, impl: PlatformImpl) -> str:
        imports = [*impl.imports, f"{self.package}.ui.theme.AppColors"]
        lines = [
            f"// {comment_text(capsule.name)} capsule v{comment_text(capsule.version)}. {GENERATED_BANNER}",
            "",
            f"package {self.package}.components",
            "",
            *(f"import {name}" for name in sorted(set(imports))),
        ]
        return "\n".join(lines) + "\n\n" + impl.source_code.strip("\n") + "\n"

    def screen_file(self, screen: ResolvedScreen) -> str:
        name = self.screen_name(screen.screen)
        imports = ["androidx.compose.runtime.Composable"]
        imports += [f"{self.package}.components.{c}" for c in self.visible_components(screen)]
        lines = [
            f"// {comment_text(screen.screen.name)} screen. {GENERATED_BANNER}",
            "",
            f"package {self.package}.screens",
            "",
            *(f"import {i}" for i in sorted(imports)),
            "",
            "@Composable",
            f"fun {name}() {{",
        ]
        body = self.body_lines(screen, 1)
        if body is None:
            lines.append(f"    // {self.placeholder_text(screen.root)}")
        else:
            lines += body
        lines.append("}")
        return "\n".join(lines) + "\n"

    def screen_registry(self, screens: list[ResolvedScreen]) -> list[tuple[str, str]]:
        lines = [
            f"// {GENERATED_BANNER}",
            "",
            f"package {self.package}.screens",
            "",
            "import androidx.compose.runtime.Composable",
            "",
            "data class AppScreen(val id: String, val name: String, val content: @Composable () -> Unit)",
            "",
            "val appScreens: List<AppScreen> = listOf(",
        ]
        for screen in screens:
            lines.append(
                f"    AppScreen({self.literals.string(screen.screen.id)}, "
                f"{self.literals.string(screen.screen.name)}) {{ {self.screen_name(screen.screen)}() }},"
            )
        lines.append(")")
        return [(f"{self.source_root}/screens/AppScreens.kt", "\n".join(lines) + "\n")]

    def min_sdk(self, dependencies: AggregatedDependencies) -> str:
        return dependencies.min_version or DEFAULT_MIN_SDK

    def app_build_gradle(self, dependencies: AggregatedDependencies) -> str:
        deps = merge_gradle_dependencies(BASE_DEPENDENCIES, dependencies.dependencies)
        lit = self.literals.string
        implementation = "\n".join(f"    implementation({lit(dep)})" for dep in deps)
        return dedent(f"""\
            // {GENERATED_BANNER}
            plugins {{
                id("com.android.application")
                id("org.jetbrains.kotlin.android")
            }}

            android {{
                namespace = {lit(self.package)}
                compileSdk = {COMPILE_SDK}

                defaultConfig {{
                    applicationId = {lit(self.package)}
                    minSdk = {self.min_sdk(dependencies)}
                    targetSdk = {COMPILE_SDK}
                    versionCode = 1
                    versionName = {lit(self.project.version)}
                }}

                buildFeatures {{
                    compose = true
                }}

                composeOptions {{
                    kotlinCompilerExtensionVersion = "1.5.8"
                }}

                kotlinOptions {{
                    jvmTarget = "17"
                }}

                compileOptions {{
                    sourceCompatibility = JavaVersion.VERSION_17
                    targetCompatibility = JavaVersion.VERSION_17
                }}
            }}

            dependencies {{
                implementation(platform({lit(COMPOSE_BOM)}))
            """) + implementation + "\n}\n"

    def manifest(self, dependencies: AggregatedDependencies) -> str:
        permissions = sorted(
            {
                permission
                for prefix, permission in PERMISSIONS.items()
                if any(dep.startswith(prefix) for dep in dependencies.dependencies)
            }
        )
        permission_lines = "".join(f'    <uses-permission android:name="{p}" />\n' for p in permissions)
        label = escape(comment_text(self.project.name), {'"': "&quot;"})
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<manifest xmlns:android="http://schemas.android.com/apk/res/android">\n'
            f"{permission_lines}"
            "\n"
            "    <application\n"
            f'        android:label="{label}"\n'
            '        android:theme="@android:style/Theme.Material.Light.NoActionBar">\n'
            "        <activity\n"
            '            android:name=".MainActivity"\n'
            '            android:exported="true">\n'
            "            <intent-filter>\n"
            '                <action android:name="android.intent.action.MAIN" />\n'
            '                <category android:name="android.intent.category.LAUNCHER" />\n'
            "            </intent-filter>\n"
            "        </activity>\n"
            "    </application>\n"
            "</manifest>\n"
        )

    def main_activity(self, theme_name: str) -> str:
        """Entry activity arranging the screens per the project's navigation."""
        pkg = self.package
        initial = self.project.initial_screen_index()
        mode = self.project.navigation_mode()
        imports = [
            "android.os.Bundle",
            "androidx.activity.ComponentActivity",
            "androidx.activity.compose.setContent",
            f"{pkg}.screens.appScreens",
            f"{pkg}.ui.theme.{theme_name}",
        ]

        if mode == NavigationType.TABS:
            imports += [
                "androidx.compose.foundation.layout.Column",
                "androidx.compose.material3.Tab",
                "androidx.compose.material3.TabRow",
                *_STATE_IMPORTS,
            ]
            content = dedent(f"""\
                var current by remember {{ mutableIntStateOf({initial}) }}
                Column {{
                    TabRow(selectedTabIndex = current) {{
                        appScreens.forEachIndexed {{ index, screen ->
                            Tab(
                                selected = index == current,
                                onClick = {{ current = index }},
                                text = {{ androidx.compose.material3.Text(screen.name) }},
                            )
                        }}
                    }}
                    appScreens[current].content()
                }}
                """)
        elif mode == NavigationType.DRAWER:
            imports += [
                "androidx.compose.material3.DrawerValue",
                "androidx.compose.material3.ModalDrawerSheet",
                "androidx.compose.material3.ModalNavigationDrawer",
                "androidx.compose.material3.NavigationDrawerItem",
                "androidx.compose.material3.rememberDrawerState",
                "androidx.compose.runtime.rememberCoroutineScope",
                "kotlinx.coroutines.launch",
                *_STATE_IMPORTS,
            ]
            content = dedent(f"""\
                var current by remember {{ mutableIntStateOf({initial}) }}
                val drawerState = rememberDrawerState(DrawerValue.Closed)
                val scope = rememberCoroutineScope()
                ModalNavigationDrawer(
                    drawerState = drawerState,
                    drawerContent = {{
                        ModalDrawerSheet {{
                            appScreens.forEachIndexed {{ index, screen ->
                                NavigationDrawerItem(
                                    label = {{ androidx.compose.material3.Text(screen.name) }},
                                    selected = index == current,
                                    onClick = {{
                                        current = index
                                        scope.launch {{ drawerState.close() }}
                                    }},
                                )
                            }}
                        }}
                    }},
                ) {{
                    appScreens[current].content()
                }}
                """)
        else:
            content = f"appScreens[{initial}].content()\n" if self.project.screens else "// No screens\n"

        pad = " " * 16
        lines = [f"// {GENERATED_BANNER}", "", f"package {pkg}", ""]
        lines += [f"import {name}" for name in sorted(imports)]
        lines += [
            "",
            "class MainActivity : ComponentActivity() {",
            "    override fun onCreate(savedInstanceState: Bundle?) {",
            "        super.onCreate(savedInstanceState)",
            "        setContent {",
            f"            {theme_name} {{",
            *(f"{pad}{line}" if line else "" for line in content.splitlines()),
            "            }",
            "        }",
            "    }",
            "}",
        ]
        return "\n".join(lines) + "\n"

    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        pkg = self.package
        project_name = self.literals.string(comment_text(self.project.name))
        theme_name = (to_pascal_case(self.project.name).lstrip("_") or "App") + "Theme"
        if not theme_name[0].isalpha():
            theme_name = f"App{theme_name}"

        settings = dedent(f"""\
            // {GENERATED_BANNER}
            pluginManagement {{
                repositories {{
                    google()
                    mavenCentral()
                    gradlePluginPortal()
                }}
            }}

            dependencyResolutionManagement {{
                repositories {{
                    google()
                    mavenCentral()
                }}
            }}

            rootProject.name = {project_name}
            include(":app")
            """)

        root_build = dedent(f"""\
            // {GENERATED_BANNER}
            plugins {{
                id("com.android.application") version "8.2.2" apply false
                id("org.jetbrains.kotlin.android") version "1.9.22" apply false
            }}
            """)

        theme_kt = dedent(f"""\
            // {GENERATED_BANNER}

            package {pkg}.ui.theme

            import androidx.compose.material3.MaterialTheme
            import androidx.compose.material3.lightColorScheme
            import androidx.compose.runtime.Composable

            @Composable
            fun {theme_name}(content: @Composable () -> Unit) {{
                MaterialTheme(
                    colorScheme = lightColorScheme(
                        primary = AppColors.Primary,
                        secondary = AppColors.Secondary,
                        background = AppColors.Background,
                        surface = AppColors.Surface,
                        error = AppColors.Error,
                    ),
                    content = content,
                )
            }}
            """)

        return [
            ("settings.gradle.kts", settings),
            ("build.gradle.kts", root_build),
            ("gradle.properties", "android.useAndroidX=true\nkotlin.code.style=official\n"),
            ("app/build.gradle.kts", self.app_build_gradle(dependencies)),
            ("app/src/main/AndroidManifest.xml", self.manifest(dependencies)),
            (f"{self.source_root}/MainActivity.kt", self.main_activity(theme_name)),
            (
                f"{self.source_root}/ui/theme/Color.kt",
                f"// {GENERATED_BANNER}\n\n" + kotlin_colors(self.project.theme, f"{pkg}.ui.theme"),
            ),
            (f"{self.source_root}/ui/theme/Theme.kt", theme_kt),
        ]


EmitterRegistry.register(Target.ANDROID, AndroidEmitter)
