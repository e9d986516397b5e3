"""
类型描述符转换工具
"""

from ..exceptions import DescriptorError


# 基本类型编码 -> 类型名
PRIMITIVE_TYPES = {
    'Z': 'boolean',
    'B': 'byte',
    'C': 'char',
    'D': 'double',
    'F': 'float',
    'I': 'int',
    'J': 'long',
    'S': 'short',
}


def translate(descriptor: str) -> str:
    """
    将字节码形式的类型名转换为可读形式
    例如: I -> int, [[Ljava.lang.String; -> java.lang.String[][], [B -> byte[]
    已经是可读形式的名称（如 java.lang.String）原样返回

    Args:
        descriptor: 类型描述符

    Returns:
        str: 可读的类型名

    Raises:
        DescriptorError: 描述符为空或只包含数组标记
    """
    if not descriptor:
        raise DescriptorError("类型描述符不能为空")

    array_depth = len(descriptor) - len(descriptor.lstrip('['))
    element = descriptor[array_depth:]
    if not element:
        raise DescriptorError(f"类型描述符缺少元素类型: {descriptor!r}")

    if len(element) == 1 and element in PRIMITIVE_TYPES:
        name = PRIMITIVE_TYPES[element]
    elif element.startswith('L') and element.endswith(';') and len(element) > 2:
        name = element[1:-1]
    else:
        name = element

    return name + '[]' * array_depth
