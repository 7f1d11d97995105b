# prompt.py
# ReAct text protocol and system prompt rendering.
#
# The Protocol bundles the five marker literals the model must emit verbatim
# together with the localized prompt text built around them. Classifier,
# step loop and prompt all read markers from the same Protocol instance.

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from react_harness.models import SegmentKind
from react_harness.registry import ToolRegistry


class Protocol(BaseModel):
    """Marker literals and localized templates for one prompt language."""

    model_config = ConfigDict(frozen=True)

    thought: str
    action: str
    action_input: str
    observation: str
    final_answer: str
    separator: str = ""

    # Templates. `{tools}` / `{names}` are filled by PromptBuilder,
    # marker fields are filled from this instance.
    prompt_template: str
    corrective: str
    tool_not_found: str

    def observe(self, result: str) -> str:
        """Observation line fed back to the model."""
        return f"{self.observation}{self.separator}{result}"

    def markers(self) -> list[tuple[str, SegmentKind]]:
        """Marker literals in scan priority order."""
        return [
            (self.action_input, SegmentKind.ACTING),
            (self.final_answer, SegmentKind.ANSWERING),
            (self.thought, SegmentKind.THINKING),
            (self.action, SegmentKind.ACTING),
            (self.observation, SegmentKind.OBSERVING),
        ]


CHINESE = Protocol(
    thought="思考：",
    action="动作：",
    action_input="动作输入：",
    observation="观察：",
    final_answer="最终答案：",
    prompt_template="""\
尽可能回答以下问题。你可以使用以下工具：

{tools}

使用以下格式：

{thought}你应该总是思考该做什么
{action}要采取的动作，应该是 [{names}] 之一
{action_input}动作的输入，多个参数以空格隔开，含空格的字符串参数请用引号括起来。\
参数个数必须与工具签名一致；即便工具没有参数，也必须给出一行空的{action_input}
{observation}动作的结果
...（这种“思考/动作/动作输入/观察”可以重复多次）
{thought}我现在知道最终答案了
{final_answer}原始输入问题的最终答案

开始！""",
    corrective=(
        "你的回复中既没有“最终答案：”，也没有紧跟“动作输入：”一行的“动作：”。"
        "请严格按照规定格式回复。"
    ),
    tool_not_found="错误：找不到工具 '{name}'。可用工具：[{names}]",
)


ENGLISH = Protocol(
    thought="Thought:",
    action="Action:",
    action_input="Action Input:",
    observation="Observation:",
    final_answer="Final Answer:",
    separator=" ",
    prompt_template="""\
Answer the following question as best you can. You have access to these tools:

{tools}

Use the following format:

{thought} you should always think about what to do
{action} the action to take, must be one of [{names}]
{action_input} the input to the action. Separate multiple arguments with spaces \
and quote string arguments that contain spaces. The argument count must match the \
tool signature; a tool without parameters still needs an empty {action_input} line
{observation} the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
{thought} I now know the final answer
{final_answer} the final answer to the original input question

Begin!""",
    corrective=(
        "Your reply contained neither 'Final Answer:' nor an 'Action:' line "
        "immediately followed by an 'Action Input:' line. Follow the format strictly."
    ),
    tool_not_found="Error: tool '{name}' not found. Available tools: [{names}]",
)

PROTOCOLS = {"zh": CHINESE, "en": ENGLISH}


class PromptBuilder:
    """Renders the system prompt for a frozen tool registry."""

    def __init__(
        self,
        registry: ToolRegistry,
        protocol: Protocol = CHINESE,
        hook: Callable[[str], str] | None = None,
    ) -> None:
        self._registry = registry
        self._protocol = protocol
        self._hook = hook

    def render_tools(self) -> str:
        blocks = []
        for tool in self._registry:
            blocks.append(f"// {tool.description}\n{tool.name}{tool.signature}")
        return "\n".join(blocks)

    def system_prompt(self) -> str:
        p = self._protocol
        prompt = p.prompt_template.format(
            tools=self.render_tools(),
            names=", ".join(self._registry.names()),
            thought=p.thought,
            action=p.action,
            action_input=p.action_input,
            observation=p.observation,
            final_answer=p.final_answer,
        )
        if self._hook is not None:
            prompt = self._hook(prompt)
        return prompt
